#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Decides which files and assemblies belong in the generated projects.
"""

import os
from typing import Callable, Iterable, List, Sequence

from compilation_host import (
    INTERNALIZED_PACKAGE_SOURCES,
    CompilationUnit,
    PackageSource,
    ScriptingLanguage,
)

# Map source extensions (without dot) to scripting languages
BUILTIN_SUPPORTED_EXTENSIONS = {
    "cs": ScriptingLanguage.CSHARP,
    "uxml": ScriptingLanguage.NONE,
    "uss": ScriptingLanguage.NONE,
    "shader": ScriptingLanguage.NONE,
    "compute": ScriptingLanguage.NONE,
    "cginc": ScriptingLanguage.NONE,
    "hlsl": ScriptingLanguage.NONE,
    "glslinc": ScriptingLanguage.NONE,
}

# Reimporting one of these changes references, so the solution must be resynced
REIMPORT_SYNC_EXTENSIONS = (".dll", ".asmdef")

ASSEMBLY_DEFINITION_EXTENSION = ".asmdef"

NO_SOURCE_EXTENSION = "NA"


def get_extension_of_source_file(path: str) -> str:
    """Lower-case extension of `path` without the leading dot."""
    return os.path.splitext(path)[1].lower()[1:]


def get_extension_of_source_files(files: Sequence[str]) -> str:
    return get_extension_of_source_file(files[0]) if files else NO_SOURCE_EXTENSION


def scripting_language_for_extension(extension: str) -> ScriptingLanguage:
    return BUILTIN_SUPPORTED_EXTENSIONS.get(extension.lstrip("."), ScriptingLanguage.NONE)


def scripting_language_for(unit: CompilationUnit) -> ScriptingLanguage:
    """Language of an assembly, judged by its first source file."""
    return scripting_language_for_extension(get_extension_of_source_files(unit.source_files))


class UnitClassifier:
    """
    Classifies source files and assets for project generation.

    Package membership is answered by the host; the user-configured extension
    list is refreshed by the orchestrator before every sync.
    """

    def __init__(
        self,
        package_source_lookup: Callable[[str], PackageSource],
        user_extensions: Iterable[str] = (),
    ):
        self._package_source_lookup = package_source_lookup
        self._user_extensions: List[str] = []
        self.set_user_extensions(user_extensions)

    @property
    def user_extensions(self) -> List[str]:
        return list(self._user_extensions)

    def set_user_extensions(self, extensions: Iterable[str]) -> None:
        self._user_extensions = [ext.lstrip(".") for ext in extensions]

    def is_non_internalized_package_path(self, path: str) -> bool:
        """True for files that come from a package not copied into the project."""
        return self._package_source_lookup(path) not in INTERNALIZED_PACKAGE_SOURCES

    def is_supported_extension(self, extension: str) -> bool:
        extension = extension.lstrip(".")
        if extension in BUILTIN_SUPPORTED_EXTENSIONS:
            return True
        return extension in self._user_extensions

    def is_eligible_source_file(self, path: str) -> bool:
        """Whether `path` should be part of the generated solution."""
        if self.is_non_internalized_package_path(path):
            return False

        extension = os.path.splitext(path)[1]

        # DLLs are not scripts but are still listed, as references
        if extension == ".dll":
            return True

        if path.lower().endswith(ASSEMBLY_DEFINITION_EXTENSION):
            return True

        return self.is_supported_extension(extension)

    def is_eligible_unit(self, unit: CompilationUnit) -> bool:
        """Units need at least one source file that survives classification."""
        return any(self.is_eligible_source_file(f) for f in unit.source_files)

    def is_non_code_asset(self, path: str) -> bool:
        """Supported files that are not source code (shaders, UI markup, styles)."""
        extension = os.path.splitext(path)[1]
        return (
            self.is_supported_extension(extension)
            and scripting_language_for_extension(extension) == ScriptingLanguage.NONE
        )

    @staticmethod
    def should_sync_on_reimported_asset(path: str) -> bool:
        return os.path.splitext(path)[1] in REIMPORT_SYNC_EXTENSIONS
