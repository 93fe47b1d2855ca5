#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Collects non-code assets (shaders, UI markup, style sheets) into per-assembly
<None Include="..."/> fragments for the generated projects.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from path_escaping import file_name_without_extension, relative_escaped_path
from unit_classifier import UnitClassifier

logger = logging.getLogger("VSCodeProjectGeneration.AssetProjectParts")

WINDOWS_NEWLINE = "\r\n"

# Script extensions appended to an asset path to ask which assembly owns it
SCRIPT_PATH_PROBE_EXTENSIONS = (".cs", ".js", ".boo")


def resolve_owning_assembly(
    asset: str, resolve_assembly_name: Callable[[str], Optional[str]]
) -> Optional[str]:
    """Name (without extension) of the assembly a script next to `asset` would compile into."""
    for probe_extension in SCRIPT_PATH_PROBE_EXTENSIONS:
        assembly_name = resolve_assembly_name(asset + probe_extension)
        if assembly_name:
            return file_name_without_extension(assembly_name)
    return None


def generate_all_asset_project_parts(
    asset_paths: Iterable[str],
    classifier: UnitClassifier,
    resolve_assembly_name: Callable[[str], Optional[str]],
    project_directory: str,
) -> Dict[str, str]:
    """
    Build the extra-include fragment of every assembly in a single pass.

    Args:
        asset_paths: Every asset path in the project
        classifier: Classifier used to skip package files and code files
        resolve_assembly_name: Host lookup from script path to assembly output name
        project_directory: Project root, stripped from the emitted paths

    Returns:
        Dict mapping assembly name to its rendered <None> entries
    """
    parts: Dict[str, List[str]] = {}

    for asset in asset_paths:
        # Exclude files coming from packages except if they are internalized
        if classifier.is_non_internalized_package_path(asset):
            continue

        if not classifier.is_non_code_asset(asset):
            continue

        assembly_name = resolve_owning_assembly(asset, resolve_assembly_name)
        if assembly_name is None:
            logger.debug(f"No assembly owns asset, skipping: {asset}")
            continue

        parts.setdefault(assembly_name, []).append(
            f'     <None Include="{relative_escaped_path(asset, project_directory)}" />{WINDOWS_NEWLINE}'
        )

    return {name: "".join(entries) for name, entries in parts.items()}
