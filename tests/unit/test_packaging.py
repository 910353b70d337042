# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Unit tests for the declared package dependencies.
"""

import ast
import re
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]

# Distribution name to import name, where they differ
IMPORT_NAMES = {"python-dotenv": "dotenv"}


def declared_dependencies():
    """Return install_requires plus every non-test extra from setup.py."""
    tree = ast.parse((ROOT / "setup.py").read_text())
    values = {}
    for node in tree.body:
        if isinstance(node, ast.Assign) and isinstance(node.targets[0], ast.Name):
            values[node.targets[0].id] = ast.literal_eval(node.value)

    requirements = list(values["install_requires"])
    for extra, packages in values["extras_require"].items():
        if extra != "test":
            requirements.extend(packages)
    return [re.split(r"[<>=!~\[ ]", r, maxsplit=1)[0] for r in requirements]


def imported_modules():
    modules = set()
    for path in (ROOT / "dyndocs").rglob("*.py"):
        for node in ast.walk(ast.parse(path.read_text())):
            if isinstance(node, ast.Import):
                modules.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
                modules.add(node.module.split(".")[0])
    return modules


@pytest.mark.unit
class TestDeclaredDependencies:
    """Tests that setup.py only declares libraries the package uses."""

    def test_every_declared_dependency_is_imported(self):
        imported = imported_modules()

        unused = [
            name
            for name in declared_dependencies()
            if IMPORT_NAMES.get(name, name).replace("-", "_") not in imported
        ]

        assert unused == []

    def test_no_dev_extra(self):
        assert "python-dotenv" not in declared_dependencies()
