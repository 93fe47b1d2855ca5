#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Tests for the snapshot-backed compilation host and its JSON loader.
"""

import json

import pytest

from compilation_host import ApiCompatibilityLevel, CompilationHost, PackageSource, ResponseFileData
from snapshot_compilation_host import (
    SnapshotCompilationHost,
    compilation_snapshot_from_dict,
    load_compilation_snapshot_from_json,
)

SNAPSHOT = {
    "project_directory": "/work/MyGame",
    "engine_assembly_path": "/Engine/Managed/Engine.dll",
    "editor_assembly_path": "/Engine/Managed/Editor.dll",
    "root_namespace": "MyGame",
    "user_extensions": ["txt"],
    "active_defines": ["PLATFORM_LINUX"],
    "assemblies": [
        {
            "output_path": "Library/ScriptAssemblies/Assembly-CSharp.dll",
            "source_files": ["Assets/Player.cs"],
            "references": ["Library/ScriptAssemblies/Gameplay.dll"],
            "defines": ["GAME"],
            "api_compatibility_level": "NET_2_0",
            "allow_unsafe_code": True,
            "response_files": ["Assets/csc.rsp"],
        },
        {"output_path": "Library/ScriptAssemblies/Gameplay.dll"},
    ],
    "asset_paths": ["Assets/UI/Main.uss"],
    "assembly_roots": {"Assets": "Assembly-CSharp.dll"},
    "packages": {"Packages/com.example.tools": "Registry"},
    "response_files": {"Assets/csc.rsp": {"defines": ["FAST"], "unsafe": True}},
    "internal_assemblies": ["mscorlib.dll"],
    "editor_internal_assemblies": ["Editor.Internal.dll"],
    "system_reference_directories": {"NET_4_6": ["/Engine/lib/4.7.1-api"]},
}


class TestSnapshotCompilationHost:
    def test_satisfies_protocol(self):
        assert isinstance(SnapshotCompilationHost(), CompilationHost)

    def test_package_source_uses_longest_prefix(self):
        host = SnapshotCompilationHost(
            packages={
                "Packages": PackageSource.BUILT_IN,
                "Packages/com.example.tools": PackageSource.GIT,
            }
        )

        assert host.package_source_for_asset_path("Packages/com.example.tools/Tool.cs") == PackageSource.GIT
        assert host.package_source_for_asset_path("Packages/other/Tool.cs") == PackageSource.BUILT_IN
        assert host.package_source_for_asset_path("Packages2/Tool.cs") == PackageSource.UNKNOWN

    def test_assembly_name_for_scripts(self, host):
        assert host.get_assembly_name_from_script_path("Assets/UI/Main.uss.cs") == "Assembly-CSharp.dll"
        assert host.get_assembly_name_from_script_path("Assets\\Gameplay\\Gun.cs") == "Gameplay.dll"
        assert host.get_assembly_name_from_script_path("Other/Gun.cs") is None

    def test_non_script_paths_have_no_assembly(self, host):
        assert host.get_assembly_name_from_script_path("Assets/UI/Main.uss") is None

    def test_default_assembly(self):
        host = SnapshotCompilationHost(default_assembly="Assembly-CSharp.dll")
        assert host.get_assembly_name_from_script_path("Anywhere/Gun.cs") == "Assembly-CSharp.dll"

    def test_response_file_by_absolute_or_relative_path(self, host):
        expected = host.response_files["Assets/csc.rsp"]

        assert host.resolve_response_file("/work/MyGame/Assets/csc.rsp", "/work/MyGame", []) is expected
        assert host.resolve_response_file("Assets/csc.rsp", "/work/MyGame", []) is expected

    def test_unknown_response_file_reports_error(self, host):
        data = host.resolve_response_file("/work/MyGame/Assets/missing.rsp", "/work/MyGame", [])

        assert data == ResponseFileData(errors=["Response file not found: /work/MyGame/Assets/missing.rsp"])

    def test_internal_assemblies(self):
        host = SnapshotCompilationHost(
            internal_assemblies=["mscorlib.dll"], editor_internal_assemblies=["Editor.Internal.dll"]
        )

        assert host.is_internal_assembly("C:\\Mono\\mscorlib.dll", False, [])
        assert not host.is_internal_assembly("/Engine/Editor.Internal.dll", False, [])
        assert host.is_internal_assembly("/Engine/Editor.Internal.dll", True, [])
        assert host.is_internal_assembly("/Libs/Extra.dll", False, ["Extra.dll"])
        assert not host.is_internal_assembly("/Libs/Extra.dll", True, [])

    def test_queries_return_copies(self, host):
        host.get_assemblies().clear()
        host.active_script_compilation_defines().append("X")

        assert len(host.assemblies) == 5
        assert host.active_defines == ["PLATFORM_LINUX"]


class TestSnapshotLoading:
    def test_from_dict(self):
        host = compilation_snapshot_from_dict(SNAPSHOT)

        unit = host.assemblies[0]
        assert unit.name == "Assembly-CSharp"
        assert unit.all_references == ["Library/ScriptAssemblies/Gameplay.dll"]
        assert unit.api_compatibility_level == ApiCompatibilityLevel.NET_2_0
        assert unit.allow_unsafe_code
        assert unit.response_files == ["Assets/csc.rsp"]

        assert host.assemblies[1].source_files == []
        assert host.assemblies[1].api_compatibility_level == ApiCompatibilityLevel.NET_4_6
        assert host.packages == {"Packages/com.example.tools": PackageSource.REGISTRY}
        assert host.response_files["Assets/csc.rsp"] == ResponseFileData(defines=["FAST"], unsafe=True)
        assert host.get_system_reference_directories(ApiCompatibilityLevel.NET_4_6) == ["/Engine/lib/4.7.1-api"]
        assert host.get_system_reference_directories(ApiCompatibilityLevel.NET_2_0) == []
        assert host.root_namespace() == "MyGame"
        assert host.project_generation_user_extensions() == ["txt"]

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")

        host, project_directory = load_compilation_snapshot_from_json(path)

        assert project_directory == "/work/MyGame"
        assert host.engine_assembly_path() == "/Engine/Managed/Engine.dll"
        assert len(host.get_assemblies()) == 2

    def test_project_directory_is_optional(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps({"assemblies": []}), encoding="utf-8")

        host, project_directory = load_compilation_snapshot_from_json(path)

        assert project_directory is None
        assert host.get_assemblies() == []

    def test_unit_without_output_path_is_rejected(self):
        with pytest.raises(KeyError):
            compilation_snapshot_from_dict({"assemblies": [{"source_files": ["Assets/A.cs"]}]})

    def test_unknown_package_source_is_rejected(self):
        with pytest.raises(ValueError):
            compilation_snapshot_from_dict({"packages": {"Packages/x": "Floppy"}})
