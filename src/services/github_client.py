import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

import httpx

from ..schemas import (
    Branch,
    CommitInfo,
    Comparison,
    FileChange,
    FileStatus,
    GitHubUser,
    PullRequestResult,
    Repository,
)
from .errors import (
    GitHubAuthError,
    GitHubError,
    GitHubNotFoundError,
    PullRequestConflictError,
)

logger = logging.getLogger(__name__)

PER_PAGE = 100
OAUTH_SCOPE = "read:user user:email repo"


def _raise_for_status(response: httpx.Response, action: str) -> None:
    if response.is_success:
        return

    try:
        message = response.json().get("message", "")
    except ValueError:
        message = response.text

    status = response.status_code
    logger.warning("GitHub %s failed with status %d: %s", action, status, message)
    if status in (401, 403):
        raise GitHubAuthError(action, status, message)
    if status == 404:
        raise GitHubNotFoundError(action, status, message)
    if status == 422 and action == "create pull request":
        raise PullRequestConflictError(action)
    raise GitHubError(action, status, message)


class GitHubClient:
    """Async client for the GitHub REST endpoints used to draft pull requests."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self, method: str, url: str, action: str, **kwargs: Any
    ) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GitHubError(action, message=str(e)) from e
        _raise_for_status(response, action)
        return response.json()

    async def get_user(self) -> GitHubUser:
        data = await self._request("GET", "/user", "get user")
        return GitHubUser.model_validate(data)

    async def get_primary_email(self) -> Optional[str]:
        """Public profile email, otherwise the primary verified address."""
        user = await self.get_user()
        if user.email:
            return user.email

        emails = await self._request("GET", "/user/emails", "list emails")
        for entry in emails:
            if entry.get("primary") and entry.get("verified"):
                return entry["email"]
        return None

    async def list_repositories(self) -> List[Repository]:
        data = await self._request(
            "GET",
            "/user/repos",
            "list repositories",
            params={"sort": "updated", "per_page": PER_PAGE},
        )
        return [
            Repository(
                id=repo["id"],
                name=repo["name"],
                full_name=repo["full_name"],
                owner=repo["owner"]["login"],
                private=repo["private"],
                description=repo.get("description"),
                updated_at=repo.get("updated_at"),
            )
            for repo in data
        ]

    async def list_branches(self, owner: str, repo: str) -> List[Branch]:
        """Fetch every branch, one page of 100 at a time until a short page."""
        branches: List[Branch] = []
        page = 1
        while True:
            data = await self._request(
                "GET",
                f"/repos/{owner}/{repo}/branches",
                "list branches",
                params={"per_page": PER_PAGE, "page": page},
            )
            branches.extend(
                Branch(
                    name=branch["name"],
                    sha=branch["commit"]["sha"],
                    protected=branch.get("protected", False),
                )
                for branch in data
            )
            if len(data) < PER_PAGE:
                return branches
            page += 1

    async def compare(self, owner: str, repo: str, base: str, head: str) -> Comparison:
        basehead = quote(f"{base}...{head}", safe="/")
        data = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/compare/{basehead}",
            "compare branches",
        )
        return Comparison(
            files=[self._file_change(entry) for entry in data.get("files") or []],
            commits=[self._commit(entry) for entry in data.get("commits") or []],
        )

    @staticmethod
    def _file_change(entry: Dict[str, Any]) -> FileChange:
        return FileChange(
            path=entry["filename"],
            status=FileStatus.from_github(entry["status"]),
            additions=entry.get("additions", 0),
            deletions=entry.get("deletions", 0),
            changes=entry.get("changes", 0),
            patch=entry.get("patch"),
            previous_path=entry.get("previous_filename"),
        )

    @staticmethod
    def _commit(entry: Dict[str, Any]) -> CommitInfo:
        commit = entry.get("commit", {})
        author = (entry.get("author") or {}).get("login") or (
            commit.get("author") or {}
        ).get("name")
        return CommitInfo(sha=entry["sha"], message=commit.get("message", ""), author=author)

    async def create_pull_request(
        self, owner: str, repo: str, title: str, body: str, head: str, base: str
    ) -> PullRequestResult:
        data = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls",
            "create pull request",
            json={"title": title, "body": body, "head": head, "base": base},
        )
        return PullRequestResult(url=data["html_url"], number=data["number"], id=data["id"])


class GitHubOAuth:
    """OAuth web flow for the GitHub app."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_url: str,
        oauth_url: str = "https://github.com/login/oauth",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_url = redirect_url
        self.oauth_url = oauth_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def build_authorize_url(self, state: str) -> str:
        query = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": self.redirect_url,
                "scope": OAUTH_SCOPE,
                "state": state,
            }
        )
        return f"{self.oauth_url}/authorize?{query}"

    async def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for an access token."""
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.transport
        ) as client:
            try:
                response = await client.post(
                    f"{self.oauth_url}/access_token",
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "redirect_uri": self.redirect_url,
                    },
                    headers={"Accept": "application/json"},
                )
            except httpx.HTTPError as e:
                raise GitHubError("exchange code", message=str(e)) from e

        _raise_for_status(response, "exchange code")
        data = response.json()
        # GitHub reports OAuth failures with a 200 and an "error" field
        if "access_token" not in data:
            raise GitHubAuthError(
                "exchange code", response.status_code, data.get("error_description", "")
            )
        return data["access_token"]
