"""Services for the application."""

from .categorizer import Category, categorize, classify
from .description_coordinator import DescriptionCoordinator
from .encryption import CredentialCipher, EncryptionError, ValidationError
from .errors import (
    GitHubAuthError,
    GitHubError,
    GitHubNotFoundError,
    PullRequestConflictError,
)
from .github_client import GitHubClient, GitHubOAuth
from .settings_store import UserSettingsStore

__all__ = [
    "Category",
    "CredentialCipher",
    "DescriptionCoordinator",
    "EncryptionError",
    "GitHubAuthError",
    "GitHubClient",
    "GitHubError",
    "GitHubNotFoundError",
    "GitHubOAuth",
    "PullRequestConflictError",
    "UserSettingsStore",
    "ValidationError",
    "categorize",
    "classify",
]
