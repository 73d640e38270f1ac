"""Mock implementation of GitHubClientProtocol for development and testing."""

from typing import Dict, List, Optional

from src.schemas import (
    Branch,
    CommitInfo,
    Comparison,
    FileChange,
    FileStatus,
    GitHubUser,
    PullRequestResult,
    Repository,
)


class MockGitHubClient:
    """Mock implementation of GitHubClientProtocol that serves canned data."""

    def __init__(self, token: str = ""):
        self._token = token
        self._next_pr_number = 1
        self.created_pull_requests: List[Dict[str, str]] = []

    async def get_user(self) -> GitHubUser:
        return GitHubUser(login="octocat", id=1, name="Mona Lisa Octocat")

    async def get_primary_email(self) -> Optional[str]:
        return "octocat@example.com"

    async def list_repositories(self) -> List[Repository]:
        return [
            Repository(
                id=1296269,
                name="hello-world",
                full_name="octocat/hello-world",
                owner="octocat",
                private=False,
                description="Mock repository",
            )
        ]

    async def list_branches(self, owner: str, repo: str) -> List[Branch]:
        return [
            Branch(name="main", sha="mock-sha-main", protected=True),
            Branch(name="feature/login", sha="mock-sha-feature"),
        ]

    async def compare(self, owner: str, repo: str, base: str, head: str) -> Comparison:
        """Mock comparison covering several categorizer buckets."""
        return Comparison(
            files=[
                FileChange(path="README.md", status=FileStatus.MODIFIED, additions=4, deletions=1),
                FileChange(path="src/login.py", status=FileStatus.ADDED, additions=120),
                FileChange(path="tests/test_login.py", status=FileStatus.ADDED, additions=40),
                FileChange(path="src/styles/login.css", status=FileStatus.MODIFIED, additions=10, deletions=8),
            ],
            commits=[
                CommitInfo(sha="mock-commit-1", message="Add login form", author="octocat"),
            ],
        )

    async def create_pull_request(
        self, owner: str, repo: str, title: str, body: str, head: str, base: str
    ) -> PullRequestResult:
        number = self._next_pr_number
        self._next_pr_number += 1
        self.created_pull_requests.append({"title": title, "head": head, "base": base})
        return PullRequestResult(
            url=f"https://github.com/{owner}/{repo}/pull/{number}",
            number=number,
            id=1000 + number,
        )

    async def aclose(self) -> None:
        return None
