"""Schemas for the application."""

from .app_schemas import (
    CreatePullRequest,
    DescriptionFormat,
    DescriptionMode,
    DiffRequest,
    DiffResponse,
    DiffStats,
    SessionUser,
    SettingsResponse,
    SettingsUpdate,
    UserSettingsData,
)
from .github import (
    Branch,
    CommitInfo,
    Comparison,
    FileChange,
    FileStatus,
    GitHubUser,
    PullRequestResult,
    Repository,
)

__all__ = [
    "Branch",
    "CommitInfo",
    "Comparison",
    "CreatePullRequest",
    "DescriptionFormat",
    "DescriptionMode",
    "DiffRequest",
    "DiffResponse",
    "DiffStats",
    "FileChange",
    "FileStatus",
    "GitHubUser",
    "PullRequestResult",
    "Repository",
    "SessionUser",
    "SettingsResponse",
    "SettingsUpdate",
    "UserSettingsData",
]
