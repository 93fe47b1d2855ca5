#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
CompilationHost backed by a recorded snapshot of the editor's compilation state.

The snapshot is plain data, usually exported by the editor to JSON:

    {
        "engine_assembly_path": "/Engine/Managed/Engine.dll",
        "editor_assembly_path": "/Engine/Managed/Editor.dll",
        "root_namespace": "",
        "user_extensions": ["txt"],
        "active_defines": ["PLATFORM_LINUX"],
        "assemblies": [
            {
                "output_path": "Library/ScriptAssemblies/Assembly-CSharp.dll",
                "source_files": ["Assets/Player.cs"],
                "references": ["Library/ScriptAssemblies/Gameplay.dll"],
                "defines": ["GAME"],
                "api_compatibility_level": "NET_4_6",
                "allow_unsafe_code": false,
                "response_files": ["Assets/csc.rsp"]
            }
        ],
        "asset_paths": ["Assets/UI/Main.uss"],
        "assembly_roots": {"Assets": "Assembly-CSharp.dll"},
        "packages": {"Packages/com.example.tools": "Registry"},
        "response_files": {"Assets/csc.rsp": {"defines": ["FAST"]}},
        "internal_assemblies": ["mscorlib.dll"],
        "editor_internal_assemblies": ["Editor.Internal.dll"],
        "system_reference_directories": {"NET_4_6": ["/Engine/MonoBleedingEdge/lib/4.7.1-api"]}
    }
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from compilation_host import (
    ApiCompatibilityLevel,
    CompilationUnit,
    PackageSource,
    ResponseFileData,
)

logger = logging.getLogger("VSCodeProjectGeneration.SnapshotHost")


def _normalize(path: str) -> str:
    return path.replace("\\", "/").rstrip("/")


def _longest_prefix_match(path: str, table: Dict[str, Any]) -> Optional[Any]:
    """Value of the longest directory prefix of `path` found in `table`."""
    normalized = _normalize(path)
    best: Optional[Tuple[int, Any]] = None
    for prefix, value in table.items():
        prefix = _normalize(prefix)
        if normalized == prefix or normalized.startswith(prefix + "/"):
            if best is None or len(prefix) > best[0]:
                best = (len(prefix), value)
    return best[1] if best else None


@dataclass
class SnapshotCompilationHost:
    """Answers CompilationHost queries from snapshot data."""

    assemblies: List[CompilationUnit] = field(default_factory=list)
    asset_paths: List[str] = field(default_factory=list)
    engine_assembly: str = ""
    editor_assembly: str = ""
    namespace: str = ""
    user_extensions: List[str] = field(default_factory=list)
    active_defines: List[str] = field(default_factory=list)
    # Directory prefix -> output file name of the assembly compiling scripts there
    assembly_roots: Dict[str, str] = field(default_factory=dict)
    default_assembly: Optional[str] = None
    script_extensions: Tuple[str, ...] = (".cs",)
    # Directory prefix -> source of the package installed there
    packages: Dict[str, PackageSource] = field(default_factory=dict)
    response_files: Dict[str, ResponseFileData] = field(default_factory=dict)
    internal_assemblies: List[str] = field(default_factory=list)
    editor_internal_assemblies: List[str] = field(default_factory=list)
    system_reference_directories: Dict[ApiCompatibilityLevel, List[str]] = field(
        default_factory=dict
    )

    def get_assemblies(self) -> List[CompilationUnit]:
        return list(self.assemblies)

    def get_all_asset_paths(self) -> List[str]:
        return list(self.asset_paths)

    def package_source_for_asset_path(self, path: str) -> PackageSource:
        source = _longest_prefix_match(path, self.packages)
        return source if source is not None else PackageSource.UNKNOWN

    def get_assembly_name_from_script_path(self, path: str) -> Optional[str]:
        if os.path.splitext(path)[1] not in self.script_extensions:
            return None
        assembly = _longest_prefix_match(os.path.dirname(_normalize(path)), self.assembly_roots)
        return assembly if assembly is not None else self.default_assembly

    def get_system_reference_directories(
        self, api_compatibility_level: ApiCompatibilityLevel
    ) -> List[str]:
        return list(self.system_reference_directories.get(api_compatibility_level, []))

    def resolve_response_file(
        self,
        path: str,
        project_directory: str,
        system_reference_directories: List[str],
    ) -> ResponseFileData:
        normalized = _normalize(path)
        project_prefix = _normalize(project_directory) + "/"
        candidates = [normalized]
        if normalized.startswith(project_prefix):
            candidates.append(normalized[len(project_prefix) :])

        for candidate in candidates:
            for key, data in self.response_files.items():
                if _normalize(key) == candidate:
                    return data

        return ResponseFileData(errors=[f"Response file not found: {path}"])

    def is_internal_assembly(
        self,
        path: str,
        is_editor_build: bool,
        additional_reference_filenames: List[str],
    ) -> bool:
        file_name = os.path.basename(_normalize(path))
        if file_name in self.internal_assemblies:
            return True
        if is_editor_build and file_name in self.editor_internal_assemblies:
            return True
        return file_name in additional_reference_filenames

    def project_generation_user_extensions(self) -> List[str]:
        return list(self.user_extensions)

    def active_script_compilation_defines(self) -> List[str]:
        return list(self.active_defines)

    def engine_assembly_path(self) -> str:
        return self.engine_assembly

    def editor_assembly_path(self) -> str:
        return self.editor_assembly

    def root_namespace(self) -> str:
        return self.namespace


# ============================================================
# Snapshot Loading
# ============================================================


def load_compilation_snapshot_from_json(
    json_path: Union[str, Path],
) -> Tuple[SnapshotCompilationHost, Optional[str]]:
    """
    Load a compilation snapshot from a JSON file.

    Args:
        json_path: Path to the snapshot JSON file

    Returns:
        Tuple of the host and the project directory recorded in the snapshot
        (None if the snapshot does not record one)
    """
    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    host = compilation_snapshot_from_dict(data)
    logger.info(
        f"Loaded compilation snapshot: {len(host.assemblies)} assemblies, "
        f"{len(host.asset_paths)} assets"
    )
    return host, data.get("project_directory")


def compilation_snapshot_from_dict(data: Dict[str, Any]) -> SnapshotCompilationHost:
    return SnapshotCompilationHost(
        assemblies=[_parse_unit_from_json(a) for a in data.get("assemblies", [])],
        asset_paths=list(data.get("asset_paths", [])),
        engine_assembly=data.get("engine_assembly_path", ""),
        editor_assembly=data.get("editor_assembly_path", ""),
        namespace=data.get("root_namespace", ""),
        user_extensions=list(data.get("user_extensions", [])),
        active_defines=list(data.get("active_defines", [])),
        assembly_roots=dict(data.get("assembly_roots", {})),
        default_assembly=data.get("default_assembly"),
        script_extensions=tuple(data.get("script_extensions", [".cs"])),
        packages={
            prefix: PackageSource(source)
            for prefix, source in data.get("packages", {}).items()
        },
        response_files={
            path: _parse_response_file_from_json(rsp)
            for path, rsp in data.get("response_files", {}).items()
        },
        internal_assemblies=list(data.get("internal_assemblies", [])),
        editor_internal_assemblies=list(data.get("editor_internal_assemblies", [])),
        system_reference_directories={
            ApiCompatibilityLevel[level]: list(directories)
            for level, directories in data.get("system_reference_directories", {}).items()
        },
    )


def _parse_unit_from_json(data: Dict[str, Any]) -> CompilationUnit:
    """Parse a compilation unit from JSON data."""
    return CompilationUnit(
        output_path=data["output_path"],
        source_files=list(data.get("source_files", [])),
        all_references=list(data.get("references", [])),
        defines=list(data.get("defines", [])),
        api_compatibility_level=ApiCompatibilityLevel[
            data.get("api_compatibility_level", "NET_4_6")
        ],
        allow_unsafe_code=bool(data.get("allow_unsafe_code", False)),
        response_files=list(data.get("response_files", [])),
    )


def _parse_response_file_from_json(data: Dict[str, Any]) -> ResponseFileData:
    """Parse pre-resolved response file data from JSON data."""
    return ResponseFileData(
        defines=list(data.get("defines", [])),
        full_path_references=list(data.get("full_path_references", [])),
        unsafe=bool(data.get("unsafe", False)),
        errors=list(data.get("errors", [])),
    )
