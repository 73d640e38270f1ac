"""GitHub-related schema classes."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class FileStatus(str, Enum):
    """Enum for file change statuses reported by a branch comparison."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"

    @classmethod
    def from_github(cls, value: str) -> "FileStatus":
        """Map a GitHub diff-entry status, folding 'changed'/'unchanged' into modified."""
        try:
            return cls(value)
        except ValueError:
            return cls.MODIFIED


class FileChange(BaseModel):
    """Represents one modified file in a branch comparison."""

    path: str = Field(min_length=1)
    status: FileStatus
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    changes: int = 0
    patch: Optional[str] = None
    previous_path: Optional[str] = None  # For renamed files


class CommitInfo(BaseModel):
    sha: str
    message: str
    author: Optional[str] = None


class Comparison(BaseModel):
    """Files and commits between a base and a head branch."""

    files: List[FileChange] = []
    commits: List[CommitInfo] = []


class Repository(BaseModel):
    id: int
    name: str
    full_name: str
    owner: str
    private: bool
    description: Optional[str] = None
    updated_at: Optional[str] = None


class Branch(BaseModel):
    name: str
    sha: str
    protected: bool = False


class GitHubUser(BaseModel):
    login: str
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None


class PullRequestResult(BaseModel):
    url: str
    number: int
    id: int
