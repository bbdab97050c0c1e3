# tests/test_packaging.py

"""Sanity checks on the project metadata in pyproject.toml."""

import unittest

from src.config.settings import Settings

PYPROJECT = Settings.BASE_DIR / "pyproject.toml"


class TestPyproject(unittest.TestCase):
    """The package metadata describes price_watch only."""

    def setUp(self) -> None:
        self.text = PYPROJECT.read_text(encoding="utf-8")

    def test_no_readme_points_at_design_documents(self) -> None:
        """The long description is not taken from internal documents."""
        for doc in ("SPEC_FULL.md", "spec.md", "DESIGN.md"):
            with self.subTest(doc=doc):
                self.assertNotIn(doc, self.text)

    def test_selectors_shipped_as_package_data(self) -> None:
        """selectors.json is installed alongside the config package."""
        self.assertIn('"src.config" = ["selectors.json"]', self.text)

    def test_scheduler_dependency_declared(self) -> None:
        """APScheduler 3.x is pinned for the interval trigger API."""
        self.assertIn('"apscheduler>=3.10,<4"', self.text)


if __name__ == "__main__":
    unittest.main()
