#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Shared fixtures: a small game project with a recorded compilation snapshot.
"""

import pytest

from compilation_host import (
    ApiCompatibilityLevel,
    CompilationUnit,
    PackageSource,
    ResponseFileData,
)
from project_generation import ProjectGeneration
from project_generation_config import ProjectGenerationConfig
from snapshot_compilation_host import SnapshotCompilationHost

ENGINE_DLL = "/Engine/Managed/UnityEngine.dll"
EDITOR_DLL = "/Engine/Managed/UnityEditor.dll"


def make_units():
    return [
        CompilationUnit(
            output_path="Library/ScriptAssemblies/Assembly-CSharp.dll",
            source_files=[
                "Assets/Player.cs",
                "Assets/Enemy.cs",
                "Assets/Plugins/Native.dll",
            ],
            all_references=[
                ENGINE_DLL,
                "Library/ScriptAssemblies/Gameplay.dll",
                "Library/ScriptAssemblies/PackageTools.dll",
                "/Libs/Newtonsoft.Json.dll",
                "/Engine/Mono/mscorlib.dll",
            ],
            defines=["GAME"],
            api_compatibility_level=ApiCompatibilityLevel.NET_4_6,
            response_files=["Assets/csc.rsp"],
        ),
        CompilationUnit(
            output_path="Library/ScriptAssemblies/Gameplay.dll",
            source_files=["Assets/Gameplay/Weapon.cs"],
            all_references=[ENGINE_DLL],
            api_compatibility_level=ApiCompatibilityLevel.NET_2_0,
        ),
        CompilationUnit(
            output_path="Library/ScriptAssemblies/PackageTools.dll",
            source_files=["Packages/com.example.tools/Tool.cs"],
        ),
        CompilationUnit(
            output_path="Library/ScriptAssemblies/ShaderOnly.dll",
            source_files=["Assets/Shaders/Water.shader"],
        ),
        CompilationUnit(output_path="Library/ScriptAssemblies/Empty.dll"),
    ]


@pytest.fixture
def project_dir(tmp_path):
    directory = tmp_path / "MyGame"
    directory.mkdir()
    return directory


@pytest.fixture
def host():
    return SnapshotCompilationHost(
        assemblies=make_units(),
        asset_paths=[
            "Assets/UI/Main.uss",
            "Assets/Player.cs",
            "Assets/Textures/grass.png",
            "Assets/Gameplay/Effects.shader",
            "Packages/com.example.tools/Style.uss",
        ],
        engine_assembly=ENGINE_DLL,
        editor_assembly=EDITOR_DLL,
        active_defines=["PLATFORM_LINUX"],
        assembly_roots={
            "Assets": "Assembly-CSharp.dll",
            "Assets/Gameplay": "Gameplay.dll",
        },
        packages={"Packages/com.example.tools": PackageSource.REGISTRY},
        response_files={
            "Assets/csc.rsp": ResponseFileData(
                defines=["FAST", "GAME"],
                full_path_references=["/Libs/Extra.dll"],
                unsafe=True,
            )
        },
        internal_assemblies=["mscorlib.dll"],
    )


@pytest.fixture
def config(project_dir):
    return ProjectGenerationConfig(project_directory=str(project_dir))


@pytest.fixture
def generation(host, config):
    return ProjectGeneration(host, config=config)
