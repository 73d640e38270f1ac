"""Rule-based PR description used when the language model is unavailable."""

from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Sequence

from src.schemas import FileChange, FileStatus

DOC_SUFFIXES = (".md", ".txt", ".rst")
TEST_MARKERS = (".test.", ".spec.")
TEST_DIRECTORIES = {"__tests__", "tests", "test"}
CONFIG_SUFFIXES = (".json", ".yml", ".yaml", ".toml")
CONFIG_NAMES = {"package.json"}
UI_SUFFIXES = (".css", ".scss", ".sass", ".less", ".jsx", ".tsx", ".vue", ".svelte")

NEW_FEATURE_MIN_ADDITIONS = 50


class Category(str, Enum):
    """Taxonomy buckets, rendered in declaration order."""

    NEW_FEATURES = "🚀 New Features"
    BUG_FIXES = "🛠 Bug Fixes"
    IMPROVEMENTS = "🔧 Improvements"
    REFACTORING = "♻️ Refactoring"
    UI_UX = "🎨 UI/UX Changes"
    DOCUMENTATION = "📚 Documentation"
    TESTING = "🧪 Testing"
    CONFIGURATION = "⚙️ Configuration"
    FILE_OPERATIONS = "📁 File Operations"


class Rule(NamedTuple):
    matches: Callable[[FileChange], bool]
    category: Category
    describe: Callable[[FileChange], str]


def _lower_path(change: FileChange) -> str:
    return change.path.lower()


def is_documentation(change: FileChange) -> bool:
    path = _lower_path(change)
    return path.endswith(DOC_SUFFIXES) or "readme" in path


def is_test(change: FileChange) -> bool:
    path = _lower_path(change)
    if any(marker in path for marker in TEST_MARKERS):
        return True
    directories = path.split("/")[:-1]
    return any(segment in TEST_DIRECTORIES for segment in directories)


def is_configuration(change: FileChange) -> bool:
    path = _lower_path(change)
    name = path.rsplit("/", 1)[-1]
    return path.endswith(CONFIG_SUFFIXES) or ".config." in path or name in CONFIG_NAMES


def is_ui(change: FileChange) -> bool:
    return _lower_path(change).endswith(UI_SUFFIXES)


# First match wins.
RULES: List[Rule] = [
    Rule(
        is_documentation,
        Category.DOCUMENTATION,
        lambda c: f"Updated documentation in {c.path}",
    ),
    Rule(
        is_test,
        Category.TESTING,
        lambda c: "Added tests" if c.status == FileStatus.ADDED else "Updated tests",
    ),
    Rule(is_configuration, Category.CONFIGURATION, lambda c: "Modified configuration"),
    Rule(
        lambda c: c.status == FileStatus.REMOVED,
        Category.REFACTORING,
        lambda c: "Removed unused code",
    ),
    Rule(
        lambda c: c.status == FileStatus.ADDED
        and c.additions > NEW_FEATURE_MIN_ADDITIONS,
        Category.NEW_FEATURES,
        lambda c: "Added new functionality",
    ),
    Rule(is_ui, Category.UI_UX, lambda c: "Updated user interface"),
    Rule(lambda c: "fix" in _lower_path(c), Category.BUG_FIXES, lambda c: "Fixed issues"),
    Rule(
        lambda c: c.additions > c.deletions * 2,
        Category.IMPROVEMENTS,
        lambda c: "Enhanced existing features",
    ),
]

DEFAULT_RULE = Rule(lambda c: True, Category.REFACTORING, lambda c: "Refactored code")


def _match(change: FileChange) -> Rule:
    for rule in RULES:
        if rule.matches(change):
            return rule
    return DEFAULT_RULE


def classify(change: FileChange) -> Category:
    """Return the single bucket a file change belongs to."""
    return _match(change).category


def categorize(changes: Sequence[FileChange]) -> str:
    """
    Group file changes into a markdown report, one section per non-empty bucket.

    Items are deduplicated within a section, keeping first-seen order, and
    sections follow the order of ``Category``.
    """
    buckets: Dict[Category, List[str]] = {category: [] for category in Category}

    for change in changes:
        rule = _match(change)
        item = rule.describe(change)
        if item not in buckets[rule.category]:
            buckets[rule.category].append(item)

    sections = [
        f"### {category.value}\n" + "\n".join(f"- {item}" for item in items)
        for category, items in buckets.items()
        if items
    ]
    return "\n\n".join(sections).strip()
