#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Compilation host contract for project generation

The editor owns compilation: it knows which assemblies exist, which source files
and references they have, which package each asset comes from, and how response
files resolve. Project generation only reads a snapshot of that information
through the CompilationHost protocol defined here.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable


class ApiCompatibilityLevel(Enum):
    """Scripting API compatibility level of a compiled assembly."""

    NET_2_0 = "NET_2_0"
    NET_2_0_SUBSET = "NET_2_0_Subset"
    NET_4_6 = "NET_4_6"
    NET_WEB = "NET_Web"
    NET_MICRO = "NET_Micro"
    NET_STANDARD_2_0 = "NET_Standard_2_0"


class PackageSource(Enum):
    """Where the package owning an asset comes from."""

    UNKNOWN = "Unknown"
    REGISTRY = "Registry"
    BUILT_IN = "BuiltIn"
    EMBEDDED = "Embedded"
    LOCAL = "Local"
    GIT = "Git"
    LOCAL_TARBALL = "LocalTarball"


# Package sources whose files live inside the project's own source tree
INTERNALIZED_PACKAGE_SOURCES = frozenset(
    {PackageSource.UNKNOWN, PackageSource.EMBEDDED, PackageSource.LOCAL}
)


class ScriptingLanguage(Enum):
    NONE = "None"
    CSHARP = "CSharp"


@dataclass
class ResponseFileData:
    """Directives parsed from one compiler response file."""

    defines: List[str] = field(default_factory=list)
    full_path_references: List[str] = field(default_factory=list)
    unsafe: bool = False
    errors: List[str] = field(default_factory=list)


@dataclass
class CompilationUnit:
    """One compiled assembly as seen by the editor's compilation pipeline."""

    output_path: str
    source_files: List[str] = field(default_factory=list)
    all_references: List[str] = field(default_factory=list)
    defines: List[str] = field(default_factory=list)
    api_compatibility_level: ApiCompatibilityLevel = ApiCompatibilityLevel.NET_4_6
    allow_unsafe_code: bool = False
    response_files: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        """Assembly name: the output file name without its extension."""
        return os.path.splitext(os.path.basename(self.output_path.replace("\\", "/")))[0]

    @property
    def output_file_name(self) -> str:
        return os.path.basename(self.output_path.replace("\\", "/"))

    @property
    def is_editor_assembly(self) -> bool:
        return self.output_path.endswith("-Editor.dll")


@runtime_checkable
class CompilationHost(Protocol):
    """
    Read-only view of the editor's compilation state.

    Implementations adapt a concrete editor (or a recorded snapshot of one) to
    the queries project generation needs. Every method is called synchronously
    from the sync pass; exceptions raised here are not caught by the generator.
    """

    def get_assemblies(self) -> List[CompilationUnit]:
        """All compilation units known to the editor."""
        ...

    def get_all_asset_paths(self) -> List[str]:
        """Every asset path in the project, packages included."""
        ...

    def package_source_for_asset_path(self, path: str) -> PackageSource:
        ...

    def get_assembly_name_from_script_path(self, path: str) -> Optional[str]:
        """Output file name of the assembly a script at `path` would compile into."""
        ...

    def get_system_reference_directories(
        self, api_compatibility_level: ApiCompatibilityLevel
    ) -> List[str]:
        ...

    def resolve_response_file(
        self,
        path: str,
        project_directory: str,
        system_reference_directories: List[str],
    ) -> ResponseFileData:
        ...

    def is_internal_assembly(
        self,
        path: str,
        is_editor_build: bool,
        additional_reference_filenames: List[str],
    ) -> bool:
        """Whether a reference is supplied by the build itself and must not be listed."""
        ...

    def project_generation_user_extensions(self) -> List[str]:
        """Extra file extensions (without dot) the user wants in generated projects."""
        ...

    def active_script_compilation_defines(self) -> List[str]:
        ...

    def engine_assembly_path(self) -> str:
        ...

    def editor_assembly_path(self) -> str:
        ...

    def root_namespace(self) -> str:
        ...
