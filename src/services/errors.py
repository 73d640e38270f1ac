"""Typed errors raised by the GitHub collaborator."""

from typing import Optional


class GitHubError(Exception):
    """A request to GitHub failed."""

    def __init__(self, action: str, status_code: Optional[int] = None, message: str = ""):
        self.action = action
        self.status_code = status_code
        self.message = message
        detail = f"{action} failed"
        if status_code is not None:
            detail += f" (status: {status_code})"
        if message:
            detail += f": {message}"
        super().__init__(detail)


class GitHubAuthError(GitHubError):
    """The token was rejected or lacks the required scope."""


class GitHubNotFoundError(GitHubError):
    """The repository, branch or user could not be found."""


class PullRequestConflictError(GitHubError):
    """GitHub refused to open the pull request (422)."""

    def __init__(self, action: str, message: str = ""):
        super().__init__(
            action,
            status_code=422,
            message=message or "No commits between branches or PR already exists",
        )
