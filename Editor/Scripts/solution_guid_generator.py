#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Deterministic GUIDs for generated solutions and projects.

GUIDs are derived from an MD5 hash of a seed string, so regenerating a project
with the same names always yields the same identifiers.
"""

import hashlib

# Project type GUID Visual Studio uses for C# projects
CSHARP_PROJECT_TYPE_GUID = "FAE04EC0-301F-11D3-BF4B-00C04F79EFBC"

PROJECT_GUID_SALT = "salt"


def identifier_for(seed: str) -> str:
    """Generate a deterministic GUID (upper case, dashed, no braces) from a seed."""
    hash_bytes = hashlib.md5(seed.encode("utf-8")).digest()
    guid = f"{hash_bytes[0]:02X}{hash_bytes[1]:02X}{hash_bytes[2]:02X}{hash_bytes[3]:02X}-"
    guid += f"{hash_bytes[4]:02X}{hash_bytes[5]:02X}-"
    guid += f"{hash_bytes[6]:02X}{hash_bytes[7]:02X}-"
    guid += f"{hash_bytes[8]:02X}{hash_bytes[9]:02X}-"
    guid += "".join(f"{b:02X}" for b in hash_bytes[10:16])
    return guid


def guid_for_project(project_name: str) -> str:
    """GUID of a generated project; `project_name` is solution name + assembly name."""
    return identifier_for(project_name + PROJECT_GUID_SALT)


def guid_for_solution(project_name: str, source_file_extension: str) -> str:
    """Project type GUID used for a project's entry in the solution."""
    if source_file_extension.lower() == "cs":
        return CSHARP_PROJECT_TYPE_GUID
    return identifier_for(project_name)
