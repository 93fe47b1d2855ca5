#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Configuration for solution and project generation.

Defaults reproduce the classic MSBuild project format that VS Code's C#
tooling understands. A project may override individual values with a
project_generation_settings.json file at its root:

    {
        "product_version": "10.0.20506",
        "mode": "SCRIPTS_AS_IDE_PROJECTS",
        "vscode_files_exclude": ["**/.git", "Library/"]
    }
"""

import dataclasses
import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Tuple, Union

logger = logging.getLogger("VSCodeProjectGeneration.Config")

SETTINGS_FILE = "project_generation_settings.json"

MSBUILD_NAMESPACE_URI = "http://schemas.microsoft.com/developer/msbuild/2003"


class ProjectGenerationMode(Enum):
    """Which assemblies get solution entries and project files."""

    # Every assembly with eligible sources, whatever its language
    SCRIPTS_AS_IDE_PROJECTS = "SCRIPTS_AS_IDE_PROJECTS"
    # Only C# assemblies
    SCRIPTS_AS_PRECOMPILED_ASSEMBLY = "SCRIPTS_AS_PRECOMPILED_ASSEMBLY"


DEFAULT_VSCODE_FILES_EXCLUDE = (
    "**/.DS_Store",
    "**/.git",
    "**/.gitignore",
    "**/.gitmodules",
    "**/*.booproj",
    "**/*.pidb",
    "**/*.suo",
    "**/*.user",
    "**/*.userprefs",
    "**/*.unityproj",
    "**/*.dll",
    "**/*.exe",
    "**/*.pdf",
    "**/*.mid",
    "**/*.midi",
    "**/*.wav",
    "**/*.gif",
    "**/*.ico",
    "**/*.jpg",
    "**/*.jpeg",
    "**/*.png",
    "**/*.psd",
    "**/*.tga",
    "**/*.tif",
    "**/*.tiff",
    "**/*.3ds",
    "**/*.3DS",
    "**/*.fbx",
    "**/*.FBX",
    "**/*.lxo",
    "**/*.LXO",
    "**/*.ma",
    "**/*.MA",
    "**/*.obj",
    "**/*.OBJ",
    "**/*.asset",
    "**/*.cubemap",
    "**/*.flare",
    "**/*.mat",
    "**/*.meta",
    "**/*.prefab",
    "**/*.unity",
    "build/",
    "Build/",
    "Library/",
    "library/",
    "obj/",
    "Obj/",
    "ProjectSettings/",
    "temp/",
    "Temp/",
)


@dataclass(frozen=True)
class ProjectGenerationConfig:
    """Immutable settings for one project directory."""

    project_directory: str

    # Project file header
    tools_version: str = "4.0"
    product_version: str = "10.0.20506"
    base_directory: str = "."
    msbuild_namespace_uri: str = MSBUILD_NAMESPACE_URI
    base_defines: Tuple[str, ...] = ("DEBUG", "TRACE")
    modern_target_framework: str = "v4.7.2"
    modern_language_version: str = "latest"
    legacy_target_framework: str = "v3.5"
    legacy_language_version: str = "4"

    # Project references
    project_extension: str = ".csproj"
    intermediate_output_directory: str = "Temp"
    script_assemblies_pattern: str = (
        r"^Library.ScriptAssemblies.(?P<dllname>(?P<project>.*)\.dll$)"
    )

    # Solution file
    solution_format_version: str = "11.00"
    visual_studio_version: str = "2010"
    default_startup_item: str = "Assembly-CSharp.csproj"
    mode: ProjectGenerationMode = ProjectGenerationMode.SCRIPTS_AS_PRECOMPILED_ASSEMBLY

    # VS Code workspace settings
    vscode_files_exclude: Tuple[str, ...] = DEFAULT_VSCODE_FILES_EXCLUDE

    def __post_init__(self):
        # Keep a single separator style so prefix stripping and file paths agree
        normalized = self.project_directory.replace("\\", "/")
        if len(normalized) > 1:
            normalized = normalized.rstrip("/")
        object.__setattr__(self, "project_directory", normalized)

    @property
    def project_name(self) -> str:
        return Path(self.project_directory).name


def _coerce_setting(name: str, value: Any) -> Any:
    if name == "mode":
        return ProjectGenerationMode(value)
    if name in ("base_defines", "vscode_files_exclude"):
        if not isinstance(value, list):
            raise TypeError(f"expected a list, got {type(value).__name__}")
        return tuple(str(item) for item in value)
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    return value


def _load_settings(settings_path: Path) -> Dict[str, Any]:
    """Load overrides from the project's settings file."""
    if not settings_path.exists():
        return {}
    try:
        settings = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to read project generation settings {settings_path}: {e}")
        return {}
    if not isinstance(settings, dict):
        logger.warning(f"Ignoring project generation settings {settings_path}: not a JSON object")
        return {}
    return settings


def load_project_generation_config(
    project_directory: Union[str, Path],
) -> ProjectGenerationConfig:
    """
    Build the configuration for a project, applying settings file overrides.

    Args:
        project_directory: Project root (the directory that receives the .sln)

    Returns:
        ProjectGenerationConfig with defaults for every value not overridden
    """
    project_directory = Path(project_directory)
    settings = _load_settings(project_directory / SETTINGS_FILE)

    known_fields = {f.name for f in dataclasses.fields(ProjectGenerationConfig)}
    overrides: Dict[str, Any] = {}
    for name, value in settings.items():
        if name == "project_directory" or name not in known_fields:
            logger.warning(f"Ignoring unknown project generation setting: {name}")
            continue
        try:
            overrides[name] = _coerce_setting(name, value)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring invalid value for {name}: {e}")

    return ProjectGenerationConfig(project_directory=str(project_directory), **overrides)
