#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Tests for the per-assembly non-code asset fragments.
"""

from asset_project_parts import generate_all_asset_project_parts, resolve_owning_assembly
from compilation_host import PackageSource
from unit_classifier import UnitClassifier


class TestResolveOwningAssembly:
    def test_probes_script_extensions_in_order(self):
        probed = []

        def resolve(path):
            probed.append(path)
            return "Legacy.dll" if path.endswith(".js") else None

        assert resolve_owning_assembly("Assets/UI/Main.uss", resolve) == "Legacy"
        assert probed == ["Assets/UI/Main.uss.cs", "Assets/UI/Main.uss.js"]

    def test_unresolved(self):
        assert resolve_owning_assembly("Assets/UI/Main.uss", lambda path: None) is None


class TestGenerateAllAssetProjectParts:
    def test_fragments_grouped_by_assembly(self, host, project_dir):
        classifier = UnitClassifier(host.package_source_for_asset_path)

        parts = generate_all_asset_project_parts(
            host.get_all_asset_paths(),
            classifier,
            host.get_assembly_name_from_script_path,
            str(project_dir),
        )

        assert parts == {
            "Assembly-CSharp": '     <None Include="Assets\\UI\\Main.uss" />\r\n',
            "Gameplay": '     <None Include="Assets\\Gameplay\\Effects.shader" />\r\n',
        }

    def test_absolute_asset_paths_are_made_relative_and_escaped(self):
        classifier = UnitClassifier(lambda path: PackageSource.UNKNOWN)

        parts = generate_all_asset_project_parts(
            ["/p/Assets/R&D/a.uss", "/p/Assets/R&D/b.uxml"],
            classifier,
            lambda path: "Game.dll",
            "/p",
        )

        assert parts == {
            "Game": (
                '     <None Include="Assets\\R&amp;D\\a.uss" />\r\n'
                '     <None Include="Assets\\R&amp;D\\b.uxml" />\r\n'
            )
        }

    def test_unowned_assets_are_skipped(self, host, project_dir):
        host.assembly_roots = {}
        classifier = UnitClassifier(host.package_source_for_asset_path)

        parts = generate_all_asset_project_parts(
            host.get_all_asset_paths(),
            classifier,
            host.get_assembly_name_from_script_path,
            str(project_dir),
        )

        assert parts == {}
