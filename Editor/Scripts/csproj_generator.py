#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
C# project (.csproj) generation for compiled assemblies.

Each eligible assembly gets one classic MSBuild project listing its sources,
its non-code assets, its binary references and its references to other
generated projects. A <ProjectExtensions> block found in an existing project
file is carried over into the regenerated file, so IDE-specific settings
survive regeneration.
"""

import logging
import posixpath
import re
import xml.etree.ElementTree as ElementTree
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from compilation_host import (
    ApiCompatibilityLevel,
    CompilationHost,
    CompilationUnit,
    ResponseFileData,
)
from file_sync import read_text_exact
from path_escaping import (
    escape_markup,
    file_name_without_extension,
    is_path_rooted,
    normalize_reference_path,
    relative_escaped_path,
    relative_path_for,
)
from project_generation_config import ProjectGenerationConfig
from solution_guid_generator import guid_for_project
from unit_classifier import UnitClassifier

logger = logging.getLogger("VSCodeProjectGeneration.ProjectFile")

WINDOWS_NEWLINE = "\r\n"

PROJECT_HEADER_LINES = [
    '<?xml version="1.0" encoding="utf-8"?>',
    '<Project ToolsVersion="{0}" DefaultTargets="Build" xmlns="{6}">',
    "  <PropertyGroup>",
    "    <LangVersion>{10}</LangVersion>",
    "  </PropertyGroup>",
    "  <PropertyGroup>",
    "    <Configuration Condition=\" '$(Configuration)' == '' \">Debug</Configuration>",
    "    <Platform Condition=\" '$(Platform)' == '' \">AnyCPU</Platform>",
    "    <ProductVersion>{1}</ProductVersion>",
    "    <SchemaVersion>2.0</SchemaVersion>",
    "    <RootNamespace>{8}</RootNamespace>",
    "    <ProjectGuid>{{{2}}}</ProjectGuid>",
    "    <OutputType>Library</OutputType>",
    "    <AppDesignerFolder>Properties</AppDesignerFolder>",
    "    <AssemblyName>{7}</AssemblyName>",
    "    <TargetFrameworkVersion>{9}</TargetFrameworkVersion>",
    "    <FileAlignment>512</FileAlignment>",
    "    <BaseDirectory>{11}</BaseDirectory>",
    "  </PropertyGroup>",
    "  <PropertyGroup Condition=\" '$(Configuration)|$(Platform)' == 'Debug|AnyCPU' \">",
    "    <DebugSymbols>true</DebugSymbols>",
    "    <DebugType>full</DebugType>",
    "    <Optimize>false</Optimize>",
    "    <OutputPath>Temp\\bin\\Debug\\</OutputPath>",
    "    <DefineConstants>{5}</DefineConstants>",
    "    <ErrorReport>prompt</ErrorReport>",
    "    <WarningLevel>4</WarningLevel>",
    "    <NoWarn>0169</NoWarn>",
    "    <AllowUnsafeBlocks>{12}</AllowUnsafeBlocks>",
    "  </PropertyGroup>",
    "  <PropertyGroup Condition=\" '$(Configuration)|$(Platform)' == 'Release|AnyCPU' \">",
    "    <DebugType>pdbonly</DebugType>",
    "    <Optimize>true</Optimize>",
    "    <OutputPath>Temp\\bin\\Release\\</OutputPath>",
    "    <ErrorReport>prompt</ErrorReport>",
    "    <WarningLevel>4</WarningLevel>",
    "    <NoWarn>0169</NoWarn>",
    "    <AllowUnsafeBlocks>{12}</AllowUnsafeBlocks>",
    "  </PropertyGroup>",
    # Everything is referenced explicitly; no implicit framework assemblies
    "  <PropertyGroup>",
    "    <NoConfig>true</NoConfig>",
    "    <NoStdLib>true</NoStdLib>",
    "    <AddAdditionalExplicitAssemblyReferences>false</AddAdditionalExplicitAssemblyReferences>",
    "    <ImplicitlyExpandNETStandardFacades>false</ImplicitlyExpandNETStandardFacades>",
    "    <ImplicitlyExpandDesignTimeFacades>false</ImplicitlyExpandDesignTimeFacades>",
    "  </PropertyGroup>",
    "  <ItemGroup>",
    '    <Reference Include="{13}">',
    "      <HintPath>{3}</HintPath>",
    "    </Reference>",
    '    <Reference Include="{14}">',
    "      <HintPath>{4}</HintPath>",
    "    </Reference>",
    "  </ItemGroup>",
    "  <ItemGroup>",
    "",
]

PROJECT_FOOTER_LINES = [
    "  </ItemGroup>",
    '  <Import Project="$(MSBuildToolsPath)\\Microsoft.CSharp.targets" />',
    "  <!-- To modify your build process, add your task inside one of the targets below and uncomment it. ",
    "       Other similar extension points exist, see Microsoft.Common.targets.",
    '  <Target Name="BeforeBuild">',
    "  </Target>",
    '  <Target Name="AfterBuild">',
    "  </Target>",
    "  -->",
    "  {0}",
    "</Project>",
    "",
]

PROJECT_HEADER_TEMPLATE = WINDOWS_NEWLINE.join(PROJECT_HEADER_LINES)
PROJECT_FOOTER_TEMPLATE = WINDOWS_NEWLINE.join(PROJECT_FOOTER_LINES)

# Markup that can contain text looking like tags
_NON_ELEMENT_MARKUP = re.compile(
    r"<!--.*?-->|<!\[CDATA\[.*?\]\]>|<\?.*?\?>|<!DOCTYPE[^>]*>", re.DOTALL
)
_ELEMENT_TAG = re.compile(
    r"<(?P<close>/)?(?:[\w.-]+:)?(?P<name>[\w.-]+)"
    r"(?:\s+[^\s=/>]+\s*=\s*(?:\"[^\"]*\"|'[^']*'))*\s*(?P<empty>/)?>"
)

PROJECT_EXTENSIONS_ELEMENT = "ProjectExtensions"


class ProjectTemplateError(RuntimeError):
    """The project header template and its argument list are out of sync."""


def merge_defines(*define_lists: Iterable[str]) -> List[str]:
    """Concatenate define lists, dropping duplicates but keeping first-seen order."""
    merged: Dict[str, None] = {}
    for defines in define_lists:
        for define in defines:
            merged.setdefault(define, None)
    return list(merged)


def _top_level_element_spans(text: str, local_name: str) -> List[Tuple[int, int]]:
    """
    (start, end) offsets of the elements named `local_name` that are direct
    children of the document root. `text` must be well-formed XML.
    """
    # Blank out comments and similar markup without moving any offsets
    masked = _NON_ELEMENT_MARKUP.sub(lambda m: " " * len(m.group()), text)

    spans: List[Tuple[int, int]] = []
    depth = 0
    start: Optional[int] = None
    for tag in _ELEMENT_TAG.finditer(masked):
        if tag.group("close"):
            depth -= 1
            if start is not None and depth == 1:
                spans.append((start, tag.end()))
                start = None
            continue

        if depth == 1 and start is None and tag.group("name") == local_name:
            if tag.group("empty"):
                spans.append((tag.start(), tag.end()))
                continue
            start = tag.start()

        if not tag.group("empty"):
            depth += 1

    return spans


def read_existing_project_extensions(project_file: str, namespace_uri: str) -> str:
    """
    Return the <ProjectExtensions> blocks of an existing project file, verbatim.

    Only direct children of the MSBuild <Project> root count. Each block is
    followed by a newline. Missing, unreadable and malformed files (and files
    without such a block) yield an empty string.
    """
    text = read_text_exact(project_file)
    if text is None:
        return ""
    text = text.lstrip("\ufeff")

    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError:
        logger.debug(f"Existing project file is not valid XML, dropping extensions: {project_file}")
        return ""

    if root.tag != f"{{{namespace_uri}}}Project":
        return ""
    expected = len(root.findall(f"{{{namespace_uri}}}{PROJECT_EXTENSIONS_ELEMENT}"))
    if not expected:
        return ""

    spans = _top_level_element_spans(text, PROJECT_EXTENSIONS_ELEMENT)
    if len(spans) != expected:
        # A same-named element from another namespace sits next to ours
        logger.debug(f"Ambiguous ProjectExtensions in {project_file}, dropping extensions")
        return ""

    return "".join(text[start:end] + WINDOWS_NEWLINE for start, end in spans)


class ProjectFileGenerator:
    """Renders the .csproj text of one assembly at a time."""

    def __init__(
        self,
        config: ProjectGenerationConfig,
        host: CompilationHost,
        classifier: UnitClassifier,
    ):
        self.config = config
        self.host = host
        self.classifier = classifier
        self.project_header_template = PROJECT_HEADER_TEMPLATE
        self._script_reference_expression = re.compile(
            config.script_assemblies_pattern, re.IGNORECASE
        )

    # ============================================================
    # Paths and identifiers
    # ============================================================

    def project_file(self, unit: CompilationUnit) -> str:
        return posixpath.join(
            self.config.project_directory, f"{unit.name}{self.config.project_extension}"
        )

    def project_guid(self, assembly_path: str) -> str:
        return guid_for_project(
            self.config.project_name + file_name_without_extension(assembly_path)
        )

    # ============================================================
    # Project text
    # ============================================================

    def project_text(
        self,
        unit: CompilationUnit,
        all_asset_project_parts: Dict[str, str],
        response_files_data: Sequence[ResponseFileData],
        all_project_units: Sequence[CompilationUnit],
    ) -> str:
        """
        Render the complete project file for `unit`.

        Args:
            unit: The assembly to render
            all_asset_project_parts: Non-code asset fragments keyed by assembly name
            response_files_data: Parsed response files of `unit`
            all_project_units: Every assembly that gets a project in this sync

        Returns:
            Project file text with Windows line endings
        """
        parts = [self.project_header(unit, response_files_data)]
        references: List[str] = []
        project_references: List[re.Match] = []

        for file in unit.source_files:
            if not self.classifier.is_eligible_source_file(file):
                continue

            if posixpath.splitext(file)[1].lower() != ".dll":
                parts.append(
                    f'     <Compile Include="{relative_escaped_path(file, self.config.project_directory)}" />{WINDOWS_NEWLINE}'
                )
            else:
                references.append(relative_path_for(file, self.config.project_directory))

        # Non-script files that should be browsable in the project
        asset_part = all_asset_project_parts.get(unit.name)
        if asset_part:
            parts.append(asset_part)

        project_output_names = {u.output_file_name for u in all_project_units}
        engine_library_names = (
            file_name_without_extension(self.host.engine_assembly_path()) + ".dll",
            file_name_without_extension(self.host.editor_assembly_path()) + ".dll",
        )
        additional_reference_filenames: List[str] = []

        for reference in dict.fromkeys(references + list(unit.all_references)):
            if self._is_engine_library(reference, engine_library_names):
                continue

            match = self._script_reference_expression.match(reference)
            if match:
                # Only reference projects we are generating; script assemblies
                # from non-internalized packages stay binary references
                if match.group("dllname") in project_output_names:
                    project_references.append(match)
                    continue

            full_reference = (
                reference
                if is_path_rooted(reference)
                else posixpath.join(self.config.project_directory, reference)
            )
            if self.host.is_internal_assembly(
                full_reference, unit.is_editor_assembly, additional_reference_filenames
            ):
                continue

            parts.append(self.reference_text(full_reference))

        for response_file_data in response_files_data:
            for reference in response_file_data.full_path_references:
                parts.append(self.reference_text(reference))

        if project_references:
            parts.append(f"  </ItemGroup>{WINDOWS_NEWLINE}")
            parts.append(f"  <ItemGroup>{WINDOWS_NEWLINE}")
            for match in project_references:
                parts.append(self.project_reference_text(match.group("project")))

        parts.append(self.project_footer(unit))
        return "".join(parts)

    def project_header(
        self, unit: CompilationUnit, response_files_data: Sequence[ResponseFileData]
    ) -> str:
        if unit.api_compatibility_level == ApiCompatibilityLevel.NET_4_6:
            target_framework_version = self.config.modern_target_framework
            target_language_version = self.config.modern_language_version
        else:
            target_framework_version = self.config.legacy_target_framework
            target_language_version = self.config.legacy_language_version

        defines = merge_defines(
            self.config.base_defines,
            self.host.active_script_compilation_defines(),
            unit.defines,
            [d for data in response_files_data for d in data.defines],
        )
        allow_unsafe = unit.allow_unsafe_code or any(
            data.unsafe for data in response_files_data
        )
        engine_assembly_path = self.host.engine_assembly_path()
        editor_assembly_path = self.host.editor_assembly_path()

        arguments = [
            self.config.tools_version,
            self.config.product_version,
            self.project_guid(unit.output_path),
            escape_markup(engine_assembly_path),
            escape_markup(editor_assembly_path),
            escape_markup(";".join(defines)),
            self.config.msbuild_namespace_uri,
            escape_markup(unit.name),
            escape_markup(self.host.root_namespace()),
            target_framework_version,
            target_language_version,
            self.config.base_directory,
            "True" if allow_unsafe else "False",
            escape_markup(file_name_without_extension(engine_assembly_path)),
            escape_markup(file_name_without_extension(editor_assembly_path)),
        ]

        try:
            return self.project_header_template.format(*arguments)
        except (IndexError, KeyError) as e:
            raise ProjectTemplateError(
                "Failed creating C# project because the C# project header did not have "
                f"the correct amount of arguments, which is {len(arguments)}"
            ) from e

    def project_footer(self, unit: CompilationUnit) -> str:
        existing_extensions = read_existing_project_extensions(
            self.project_file(unit), self.config.msbuild_namespace_uri
        )
        return PROJECT_FOOTER_TEMPLATE.format(existing_extensions)

    @staticmethod
    def reference_text(full_reference: str) -> str:
        escaped_full_path = normalize_reference_path(full_reference)
        return (
            f' <Reference Include="{file_name_without_extension(escaped_full_path)}">{WINDOWS_NEWLINE}'
            f" <HintPath>{escaped_full_path}</HintPath>{WINDOWS_NEWLINE}"
            f" </Reference>{WINDOWS_NEWLINE}"
        )

    def project_reference_text(self, referenced_project: str) -> str:
        # Guid of a reference to a not-yet-built output still matches its project
        guid = self.project_guid(
            posixpath.join(
                self.config.intermediate_output_directory, referenced_project + ".dll"
            )
        )
        name = escape_markup(referenced_project)
        return (
            f'    <ProjectReference Include="{name}{self.config.project_extension}">{WINDOWS_NEWLINE}'
            f"      <Project>{{{guid}}}</Project>{WINDOWS_NEWLINE}"
            f"      <Name>{name}</Name>{WINDOWS_NEWLINE}"
            f"    </ProjectReference>{WINDOWS_NEWLINE}"
        )

    @staticmethod
    def _is_engine_library(reference: str, engine_library_names: Sequence[str]) -> bool:
        normalized = reference.replace("\\", "/")
        return any(normalized.endswith("/" + name) for name in engine_library_names)
