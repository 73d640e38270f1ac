"""Application-wide schema classes."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .github import FileChange


class CamelModel(BaseModel):
    """Accepts and emits camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DescriptionMode(str, Enum):
    PATCH = "patch"  # Describe from file diffs
    COMMIT = "commit"  # Describe from commit messages
    ALGO = "algo"  # Skip the model, use the rule-based categorizer


class DescriptionFormat(str, Enum):
    SIMPLE = "simple"
    CATEGORIZED = "categorized"
    DETAILED = "detailed"


class DiffRequest(CamelModel):
    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    base_branch: str = Field(min_length=1)
    target_branch: str = Field(min_length=1)
    mode: DescriptionMode = DescriptionMode.PATCH
    format: DescriptionFormat = DescriptionFormat.CATEGORIZED


class DiffStats(CamelModel):
    total_files: int = 0
    total_additions: int = 0
    total_deletions: int = 0
    commits: int = 0


class DiffResponse(CamelModel):
    description: str
    file_changes: List[FileChange]
    stats: DiffStats
    fallback: bool = False
    used_model: Optional[str] = None


class CreatePullRequest(CamelModel):
    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    title: str = Field(min_length=1)
    body: str = Field(min_length=1)
    head: str = Field(min_length=1)
    base: str = Field(min_length=1)


class UserSettingsData(BaseModel):
    """Decrypted view of a user's stored credentials."""

    gemini_api_key: str = ""
    github_pat_token: str = ""
    gemini_key_expires_at: Optional[datetime] = None
    github_token_expires_at: Optional[datetime] = None


class SettingsUpdate(CamelModel):
    gemini_api_key: Optional[str] = None
    github_pat_token: Optional[str] = None
    gemini_key_expires_at: Optional[datetime] = None
    github_token_expires_at: Optional[datetime] = None


class SettingsResponse(CamelModel):
    gemini_api_key: str = ""  # Masked
    github_pat_token: str = ""  # Masked
    gemini_configured: bool = False
    github_configured: bool = False
    gemini_key_expires_at: Optional[datetime] = None
    github_token_expires_at: Optional[datetime] = None


class SessionUser(BaseModel):
    """
    The signed-in user as kept in the session cookie.

    The cookie is signed but readable, so the OAuth token is stored encrypted
    for the user's email.
    """

    login: str
    email: str
    sealed_access_token: str
