"""GitHub client protocol interface."""

from typing import List, Optional, Protocol, runtime_checkable

from ..schemas import Branch, Comparison, GitHubUser, PullRequestResult, Repository


@runtime_checkable
class GitHubClientProtocol(Protocol):
    """Protocol for the GitHub REST operations the application uses."""

    async def get_user(self) -> GitHubUser:
        """The authenticated user."""
        ...

    async def get_primary_email(self) -> Optional[str]:
        """Primary verified email of the authenticated user, if visible."""
        ...

    async def list_repositories(self) -> List[Repository]:
        """Repositories of the authenticated user, most recently updated first."""
        ...

    async def list_branches(self, owner: str, repo: str) -> List[Branch]:
        """All branches of a repository."""
        ...

    async def compare(self, owner: str, repo: str, base: str, head: str) -> Comparison:
        """Files and commits between two branches."""
        ...

    async def create_pull_request(
        self, owner: str, repo: str, title: str, body: str, head: str, base: str
    ) -> PullRequestResult:
        """Open a pull request from head into base."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...
