"""Unit tests for the rule-based change categorizer."""

import pytest

from src.schemas import FileChange, FileStatus
from src.services import Category, categorize, classify


def change(path, status=FileStatus.MODIFIED, additions=1, deletions=1):
    return FileChange(path=path, status=status, additions=additions, deletions=deletions)


class TestClassify:
    """Test cases for single-file classification."""

    @pytest.mark.parametrize(
        "file_change,expected",
        [
            (change("docs/guide.md"), Category.DOCUMENTATION),
            (change("NOTES.TXT"), Category.DOCUMENTATION),
            (change("docs/index.rst"), Category.DOCUMENTATION),
            (change("ReadMe"), Category.DOCUMENTATION),
            (change("src/app.test.ts"), Category.TESTING),
            (change("src/app.spec.js"), Category.TESTING),
            (change("src/__tests__/app.js"), Category.TESTING),
            (change("tests/unit/test_app.py"), Category.TESTING),
            (change("tsconfig.json"), Category.CONFIGURATION),
            (change(".github/workflows/ci.yml"), Category.CONFIGURATION),
            (change("pyproject.toml"), Category.CONFIGURATION),
            (change("webpack.config.js"), Category.CONFIGURATION),
            (change("src/old.py", FileStatus.REMOVED), Category.REFACTORING),
            (change("src/new.py", FileStatus.ADDED, additions=51), Category.NEW_FEATURES),
            (change("src/App.tsx"), Category.UI_UX),
            (change("styles/site.scss"), Category.UI_UX),
            (change("src/hotfix_auth.py"), Category.BUG_FIXES),
            (change("src/core.py", additions=21, deletions=10), Category.IMPROVEMENTS),
            (change("src/core.py", additions=20, deletions=10), Category.REFACTORING),
        ],
    )
    def test_buckets(self, file_change, expected):
        assert classify(file_change) == expected

    def test_documentation_outranks_removed(self):
        """A removed README is documentation, not refactoring."""
        assert classify(change("README.md", FileStatus.REMOVED)) == Category.DOCUMENTATION

    def test_testing_outranks_configuration(self):
        assert classify(change("tests/fixtures/data.json")) == Category.TESTING

    def test_small_added_file_is_not_a_feature(self):
        assert (
            classify(change("src/new.py", FileStatus.ADDED, additions=50, deletions=0))
            == Category.IMPROVEMENTS
        )

    def test_added_ui_file_over_threshold_is_feature(self):
        assert (
            classify(change("src/Page.vue", FileStatus.ADDED, additions=200))
            == Category.NEW_FEATURES
        )

    def test_test_word_in_file_name_is_not_a_test_directory(self):
        assert classify(change("src/contest.py", additions=1, deletions=5)) == Category.REFACTORING

    def test_file_operations_bucket_is_never_targeted(self):
        statuses = list(FileStatus)
        changes = [change(f"src/file{i}.py", status) for i, status in enumerate(statuses)]
        assert all(classify(c) != Category.FILE_OPERATIONS for c in changes)


class TestCategorize:
    """Test cases for the rendered report."""

    def test_empty_input(self):
        assert categorize([]) == ""

    def test_single_documentation_file(self):
        assert categorize([change("README.md")]) == (
            "### 📚 Documentation\n- Updated documentation in README.md"
        )

    def test_sections_follow_taxonomy_order(self):
        report = categorize(
            [
                change("README.md"),
                change("src/fix_login.py", deletions=3),
                change("src/feature.py", FileStatus.ADDED, additions=100),
            ]
        )
        assert report == (
            "### 🚀 New Features\n- Added new functionality\n\n"
            "### 🛠 Bug Fixes\n- Fixed issues\n\n"
            "### 📚 Documentation\n- Updated documentation in README.md"
        )

    def test_items_are_deduplicated(self):
        report = categorize(
            [
                change("package.json"),
                change("config/app.yaml"),
                change("setup.toml"),
            ]
        )
        assert report == "### ⚙️ Configuration\n- Modified configuration"

    def test_added_and_updated_tests_are_distinct_items(self):
        report = categorize(
            [
                change("tests/test_a.py", FileStatus.ADDED),
                change("tests/test_b.py"),
                change("tests/test_c.py", FileStatus.ADDED),
            ]
        )
        assert report == "### 🧪 Testing\n- Added tests\n- Updated tests"

    def test_removed_and_refactored_share_a_section(self):
        report = categorize(
            [
                change("src/legacy.py", FileStatus.REMOVED),
                change("src/core.py", additions=1, deletions=9),
            ]
        )
        assert report == "### ♻️ Refactoring\n- Removed unused code\n- Refactored code"

    def test_every_change_lands_in_one_section(self):
        changes = [
            change("README.md"),
            change("src/app.spec.ts"),
            change("package.json"),
            change("src/gone.py", FileStatus.REMOVED),
            change("src/big.py", FileStatus.ADDED, additions=300),
            change("src/theme.css"),
            change("src/bugfix.py"),
            change("src/grow.py", additions=10, deletions=1),
            change("src/shrink.py", additions=1, deletions=10),
        ]
        report = categorize(changes)
        headers = [line for line in report.splitlines() if line.startswith("### ")]
        assert len(headers) == 8
        assert Category.FILE_OPERATIONS.value not in report
        assert report == report.strip()

    def test_is_deterministic(self):
        changes = [
            change("b.css"),
            change("a.md"),
            change("c.py", FileStatus.RENAMED, additions=0, deletions=0),
        ]
        assert categorize(changes) == categorize(list(changes))
