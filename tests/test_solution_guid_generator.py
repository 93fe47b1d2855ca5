#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Tests for deterministic GUID generation.
"""

import hashlib
import re

from solution_guid_generator import (
    CSHARP_PROJECT_TYPE_GUID,
    guid_for_project,
    guid_for_solution,
    identifier_for,
)

GUID_FORMAT = re.compile(r"^[0-9A-F]{8}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{12}$")


class TestIdentifierFor:
    def test_format_is_dashed_upper_case_hex(self):
        assert GUID_FORMAT.match(identifier_for("MyGameAssembly-CSharp"))

    def test_same_seed_gives_same_guid(self):
        assert identifier_for("MyGameGameplay") == identifier_for("MyGameGameplay")

    def test_different_seeds_differ(self):
        assert identifier_for("MyGameGameplay") != identifier_for("MyGameGameplay2")

    def test_matches_md5_of_seed(self):
        digest = hashlib.md5("seed".encode("utf-8")).hexdigest().upper()
        expected = "-".join(
            [digest[0:8], digest[8:12], digest[12:16], digest[16:20], digest[20:32]]
        )
        assert identifier_for("seed") == expected

    def test_empty_seed_is_valid(self):
        assert GUID_FORMAT.match(identifier_for(""))


class TestProjectAndSolutionGuids:
    def test_project_guid_is_salted(self):
        assert guid_for_project("MyGameGameplay") == identifier_for("MyGameGameplaysalt")

    def test_csharp_solution_guid_is_project_type_guid(self):
        assert guid_for_solution("MyGame", "cs") == CSHARP_PROJECT_TYPE_GUID
        assert guid_for_solution("MyGame", "CS") == CSHARP_PROJECT_TYPE_GUID

    def test_other_languages_hash_the_project_name(self):
        assert guid_for_solution("MyGame", "boo") == identifier_for("MyGame")
