#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Path and XML text helpers for generated project files.
"""

import os
import re

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:[\\/]")


def escape_markup(text: str) -> str:
    """Escape text for use inside XML attributes and elements."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def relative_path_for(path: str, project_directory: str) -> str:
    """
    Convert `path` to backslash separators and strip the project directory prefix.

    The prefix is only stripped at a directory boundary; paths outside the
    project directory are returned with their separators converted.
    """
    prefix = project_directory.replace("/", "\\").rstrip("\\")
    path = path.replace("/", "\\")
    if prefix and path.startswith(prefix + "\\"):
        return path[len(prefix) + 1 :]
    return path


def relative_escaped_path(path: str, project_directory: str) -> str:
    return escape_markup(relative_path_for(path, project_directory))


def normalize_reference_path(path: str) -> str:
    """Escape a reference path and convert it to forward slashes for HintPath."""
    return escape_markup(path).replace("\\", "/")


def is_path_rooted(path: str) -> bool:
    return path.startswith(("/", "\\")) or bool(_DRIVE_PREFIX.match(path))


def file_name_without_extension(path: str) -> str:
    return os.path.splitext(os.path.basename(path.replace("\\", "/")))[0]
