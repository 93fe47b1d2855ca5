#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
VS Code Solution and Project Generation

Keeps a Visual Studio solution and one C# project per script assembly in sync
with the editor's compilation state, so VS Code's C# tooling sees the same
sources, defines and references the editor compiles with.

The sync workflow:
1. Collect the assemblies that have at least one eligible source file
2. Collect non-code assets (shaders, UI markup) per owning assembly
3. Write the .sln listing every generated project
4. Write one .csproj per assembly
5. Create .vscode/settings.json once, hiding build artifacts from the explorer

Files are only rewritten when their content changes.

Usage:
    # Regenerate from a recorded compilation snapshot
    python project_generation.py --snapshot snapshot.json --project /path/to/project

    # Only regenerate if the changed files matter
    python project_generation.py --snapshot snapshot.json --if-needed --changed Assets/Player.cs

    # From the editor's Python console
    import project_generation
    generation = project_generation.ProjectGeneration(host, project_directory="/path/to/project")
    generation.sync()
"""

import argparse
import json
import logging
import posixpath
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from asset_project_parts import generate_all_asset_project_parts
from compilation_host import CompilationHost, CompilationUnit, ResponseFileData, ScriptingLanguage
from csproj_generator import ProjectFileGenerator
from file_sync import sync_file_if_not_changed, write_text_exact
from path_escaping import is_path_rooted
from project_generation_config import (
    ProjectGenerationConfig,
    ProjectGenerationMode,
    load_project_generation_config,
)
from sln_generator import SolutionFileGenerator
from snapshot_compilation_host import load_compilation_snapshot_from_json
from unit_classifier import UnitClassifier, scripting_language_for

# Set up logging
logger = logging.getLogger("VSCodeProjectGeneration.Sync")

VSCODE_DIRECTORY = ".vscode"
VSCODE_SETTINGS_FILE = "settings.json"


@dataclass
class ProjectSyncResult:
    """Result of a full solution and project sync."""

    success: bool = False
    solution_file: str = ""
    solution_written: bool = False
    projects_written: List[str] = field(default_factory=list)
    projects_unchanged: List[str] = field(default_factory=list)
    vscode_settings_created: bool = False

    # Response file parse errors and other non-fatal problems
    warnings: List[str] = field(default_factory=list)

    @property
    def files_written(self) -> int:
        return int(self.solution_written) + len(self.projects_written)


class ProjectGeneration:
    """
    Generates the solution and project files for one project directory.

    The compilation state is read from a CompilationHost on every sync; nothing
    is cached between syncs apart from the user extension list.
    """

    def __init__(
        self,
        host: CompilationHost,
        config: Optional[ProjectGenerationConfig] = None,
        project_directory: Optional[str] = None,
    ):
        if config is None:
            if project_directory is None:
                raise ValueError("Either config or project_directory is required")
            config = load_project_generation_config(project_directory)

        self.host = host
        self.config = config
        self.classifier = UnitClassifier(host.package_source_for_asset_path)
        self.project_generator = ProjectFileGenerator(config, host, self.classifier)
        self.solution_generator = SolutionFileGenerator(
            config,
            self.project_generator.project_file,
            self.project_generator.project_guid,
        )

    @property
    def project_directory(self) -> str:
        return self.config.project_directory

    def solution_file(self) -> str:
        return self.solution_generator.solution_file()

    def project_file(self, unit: CompilationUnit) -> str:
        return self.project_generator.project_file(unit)

    # ============================================================
    # Sync Entry Points
    # ============================================================

    def sync_if_needed(
        self, affected_files: Iterable[str], reimported_files: Iterable[str]
    ) -> Optional[ProjectSyncResult]:
        """
        Sync the solution if any of the changed files are relevant.

        Nothing is generated until the solution has been synced once with sync().

        Args:
            affected_files: Files whose status has changed
            reimported_files: Files that got reimported

        Returns:
            The sync result, or None if no sync was needed
        """
        self._setup_project_supported_extensions()

        if not self.has_solution_been_generated():
            return None
        if not self._have_files_been_modified(affected_files, reimported_files):
            return None
        return self.sync()

    def sync(self) -> ProjectSyncResult:
        """Regenerate the solution and every project unconditionally."""
        self._setup_project_supported_extensions()
        return self._generate_and_write_solution_and_projects()

    def has_solution_been_generated(self) -> bool:
        return Path(self.solution_file()).exists()

    # ============================================================
    # Classification
    # ============================================================

    def _setup_project_supported_extensions(self) -> None:
        self.classifier.set_user_extensions(self.host.project_generation_user_extensions())

    def _have_files_been_modified(
        self, affected_files: Iterable[str], reimported_files: Iterable[str]
    ) -> bool:
        return any(self.classifier.is_eligible_source_file(f) for f in affected_files) or any(
            self.classifier.should_sync_on_reimported_asset(f) for f in reimported_files
        )

    def eligible_units(self) -> List[CompilationUnit]:
        """Assemblies with at least one source file that belongs in the solution."""
        return [
            unit
            for unit in self.host.get_assemblies()
            if unit.source_files and self.classifier.is_eligible_unit(unit)
        ]

    def relevant_units_for_mode(
        self, units: Sequence[CompilationUnit]
    ) -> List[CompilationUnit]:
        if self.config.mode == ProjectGenerationMode.SCRIPTS_AS_IDE_PROJECTS:
            return list(units)
        return [u for u in units if scripting_language_for(u) == ScriptingLanguage.CSHARP]

    # ============================================================
    # Generation
    # ============================================================

    def _generate_and_write_solution_and_projects(self) -> ProjectSyncResult:
        result = ProjectSyncResult(solution_file=self.solution_file())

        units = self.eligible_units()
        all_asset_project_parts = generate_all_asset_project_parts(
            self.host.get_all_asset_paths(),
            self.classifier,
            self.host.get_assembly_name_from_script_path,
            self.project_directory,
        )
        project_units = self.relevant_units_for_mode(units)

        result.solution_written = sync_file_if_not_changed(
            self.solution_file(), self.solution_generator.solution_text(project_units)
        )

        for unit in project_units:
            response_files_data = self._parse_response_file_data(unit, result)
            project_file = self.project_file(unit)
            project_text = self.project_generator.project_text(
                unit, all_asset_project_parts, response_files_data, project_units
            )
            if sync_file_if_not_changed(project_file, project_text):
                result.projects_written.append(project_file)
            else:
                result.projects_unchanged.append(project_file)

        result.vscode_settings_created = self._write_vscode_settings_files()
        result.success = True

        logger.info(
            f"Synced {len(project_units)} projects "
            f"({result.files_written} files written) into {self.project_directory}"
        )
        return result

    def _parse_response_file_data(
        self, unit: CompilationUnit, result: ProjectSyncResult
    ) -> List[ResponseFileData]:
        """
        Resolve the response files of `unit` in declaration order.

        Parse errors are logged and recorded as warnings; the project is still
        generated from whatever the response file yielded.
        """
        system_reference_directories = self.host.get_system_reference_directories(
            unit.api_compatibility_level
        )

        responses = []
        for response_file in unit.response_files:
            full_path = (
                response_file
                if is_path_rooted(response_file)
                else posixpath.join(self.project_directory, response_file)
            )
            data = self.host.resolve_response_file(
                full_path, self.project_directory, system_reference_directories
            )
            for error in data.errors:
                message = f"{response_file} Parse Error : {error}"
                logger.warning(message)
                result.warnings.append(message)
            responses.append(data)

        return responses

    def _write_vscode_settings_files(self) -> bool:
        """Create .vscode/settings.json if it does not exist yet."""
        vscode_directory = Path(self.project_directory) / VSCODE_DIRECTORY
        vscode_directory.mkdir(parents=True, exist_ok=True)

        settings_path = vscode_directory / VSCODE_SETTINGS_FILE
        if settings_path.exists():
            return False

        write_text_exact(settings_path, vscode_settings_text(self.config))
        logger.debug(f"Wrote: {settings_path}")
        return True


def vscode_settings_text(config: ProjectGenerationConfig) -> str:
    settings = {"files.exclude": {pattern: True for pattern in config.vscode_files_exclude}}
    return json.dumps(settings, indent=4)


# ============================================================
# Command Line Interface
# ============================================================


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for command line usage."""
    parser = argparse.ArgumentParser(
        description="Generate VS Code solution and project files from a compilation snapshot"
    )
    parser.add_argument(
        "--snapshot", "-s", required=True, help="Path to compilation snapshot JSON file"
    )
    parser.add_argument(
        "--project",
        "-p",
        help="Project directory (defaults to the directory recorded in the snapshot)",
    )
    parser.add_argument(
        "--if-needed",
        action="store_true",
        help="Only sync if --changed/--reimported files require it",
    )
    parser.add_argument(
        "--changed", nargs="*", default=[], help="Files whose status has changed"
    )
    parser.add_argument(
        "--reimported", nargs="*", default=[], help="Files that got reimported"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    try:
        host, snapshot_project_directory = load_compilation_snapshot_from_json(args.snapshot)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Failed to load compilation snapshot: {e}")
        return 1

    project_directory = args.project or snapshot_project_directory
    if not project_directory:
        logger.error("--project is required when the snapshot does not record one")
        return 1

    generation = ProjectGeneration(host, project_directory=project_directory)

    if args.if_needed:
        result = generation.sync_if_needed(args.changed, args.reimported)
        if result is None:
            logger.info("No relevant changes, solution left untouched")
            return 0
    else:
        generation.sync()

    return 0


if __name__ == "__main__":
    sys.exit(main())
