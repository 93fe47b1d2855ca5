#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Visual Studio solution (.sln) generation.

The solution lists one project per generated assembly together with its
Debug/Release configuration mapping. A MonoDevelopProperties section found in
the existing solution is carried over, otherwise a default one is written.
"""

import logging
import posixpath
import re
from typing import Callable, List, Sequence

from compilation_host import CompilationUnit
from file_sync import read_text_exact
from project_generation_config import ProjectGenerationConfig
from solution_guid_generator import guid_for_solution
from unit_classifier import get_extension_of_source_files

logger = logging.getLogger("VSCodeProjectGeneration.SolutionFile")

WINDOWS_NEWLINE = "\r\n"

SOLUTION_TEMPLATE = WINDOWS_NEWLINE.join(
    [
        "",
        "Microsoft Visual Studio Solution File, Format Version {0}",
        "# Visual Studio {1}",
        "{2}",
        "Global",
        "\tGlobalSection(SolutionConfigurationPlatforms) = preSolution",
        "\t\tDebug|Any CPU = Debug|Any CPU",
        "\t\tRelease|Any CPU = Release|Any CPU",
        "\tEndGlobalSection",
        "\tGlobalSection(ProjectConfigurationPlatforms) = postSolution",
        "{3}",
        "\tEndGlobalSection",
        "\tGlobalSection(SolutionProperties) = preSolution",
        "\t\tHideSolutionNode = FALSE",
        "\tEndGlobalSection",
        "{4}",
        "EndGlobal",
        "",
    ]
)

SOLUTION_PROJECT_ENTRY_TEMPLATE = WINDOWS_NEWLINE.join(
    [
        'Project("{{{0}}}") = "{1}", "{2}", "{{{3}}}"',
        "EndProject",
    ]
)

SOLUTION_PROJECT_CONFIGURATION_TEMPLATE = WINDOWS_NEWLINE.join(
    [
        "\t\t{{{0}}}.Debug|Any CPU.ActiveCfg = Debug|Any CPU",
        "\t\t{{{0}}}.Debug|Any CPU.Build.0 = Debug|Any CPU",
        "\t\t{{{0}}}.Release|Any CPU.ActiveCfg = Release|Any CPU",
        "\t\t{{{0}}}.Release|Any CPU.Build.0 = Release|Any CPU",
    ]
)

MONODEVELOP_PROPERTY_HEADER = re.compile(r"^\s*GlobalSection\(MonoDevelopProperties.*\)")

# Only CR, LF and CRLF end a line in a solution file
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def default_solution_properties(startup_item: str) -> str:
    return WINDOWS_NEWLINE.join(
        [
            "\tGlobalSection(MonoDevelopProperties) = preSolution",
            f"\t\tStartupItem = {startup_item}",
            "\tEndGlobalSection",
        ]
    )


def read_existing_solution_properties(solution_file: str, default_properties: str) -> str:
    """
    Extract the MonoDevelopProperties sections of an existing solution.

    Falls back to `default_properties` when the file is missing, unreadable or
    has no such section.
    """
    text = read_text_exact(solution_file)
    if text is None:
        return default_properties

    sections: List[str] = []
    collecting: List[str] = []
    for line in _LINE_BREAK.split(text):
        if not collecting and MONODEVELOP_PROPERTY_HEADER.match(line):
            collecting.append(line)
            if "EndGlobalSection" in line:
                sections.append(line)
                collecting = []
            continue

        if collecting:
            collecting.append(line)
            if "EndGlobalSection" in line:
                sections.append(WINDOWS_NEWLINE.join(collecting))
                collecting = []

    if not sections:
        logger.debug(f"No MonoDevelopProperties in {solution_file}, using defaults")
        return default_properties
    return WINDOWS_NEWLINE.join(sections)


class SolutionFileGenerator:
    """Renders the solution text for a set of generated projects."""

    def __init__(
        self,
        config: ProjectGenerationConfig,
        project_file: Callable[[CompilationUnit], str],
        project_guid: Callable[[str], str],
    ):
        self.config = config
        self._project_file = project_file
        self._project_guid = project_guid

    def solution_file(self) -> str:
        return posixpath.join(
            self.config.project_directory, f"{self.config.project_name}.sln"
        )

    def solution_text(self, units: Sequence[CompilationUnit]) -> str:
        """
        Render the solution for `units`.

        `units` must already be filtered for the active generation mode.
        """
        project_entries = self.project_entries(units)
        project_configurations = WINDOWS_NEWLINE.join(
            self.project_active_configurations(self._project_guid(u.output_path))
            for u in units
        )
        existing_properties = read_existing_solution_properties(
            self.solution_file(),
            default_solution_properties(self.config.default_startup_item),
        )
        return SOLUTION_TEMPLATE.format(
            self.config.solution_format_version,
            self.config.visual_studio_version,
            project_entries,
            project_configurations,
            existing_properties,
        )

    def project_entries(self, units: Sequence[CompilationUnit]) -> str:
        """One Project(...) / EndProject pair per unit."""
        return WINDOWS_NEWLINE.join(
            SOLUTION_PROJECT_ENTRY_TEMPLATE.format(
                self.solution_guid(u),
                u.name,
                posixpath.basename(self._project_file(u)),
                self._project_guid(u.output_path),
            )
            for u in units
        )

    def solution_guid(self, unit: CompilationUnit) -> str:
        return guid_for_solution(
            self.config.project_name, get_extension_of_source_files(unit.source_files)
        )

    @staticmethod
    def project_active_configurations(project_guid: str) -> str:
        return SOLUTION_PROJECT_CONFIGURATION_TEMPLATE.format(project_guid)
