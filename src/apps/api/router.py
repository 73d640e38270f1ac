import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from src.dependencies import (
    get_current_user,
    get_description_coordinator,
    get_gemini_api_key,
    get_github_client,
    get_settings_store,
    get_user_credentials,
)
from src.protocols.github_client_protocol import GitHubClientProtocol
from src.schemas import (
    Branch,
    CreatePullRequest,
    DiffRequest,
    DiffResponse,
    GitHubUser,
    PullRequestResult,
    Repository,
    SessionUser,
    SettingsResponse,
    SettingsUpdate,
    UserSettingsData,
)
from src.services import (
    DescriptionCoordinator,
    EncryptionError,
    GitHubAuthError,
    GitHubError,
    GitHubNotFoundError,
    PullRequestConflictError,
    UserSettingsStore,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["prdraft"], dependencies=[Depends(get_current_user)])


def _http_error(e: GitHubError, detail: str) -> HTTPException:
    if isinstance(e, PullRequestConflictError):
        return HTTPException(status_code=422, detail=e.message)
    if isinstance(e, GitHubAuthError):
        return HTTPException(status_code=401, detail="GitHub rejected the access token")
    if isinstance(e, GitHubNotFoundError):
        return HTTPException(status_code=404, detail=f"{detail}: not found")
    return HTTPException(status_code=500, detail=detail)


def mask_secret(value: str) -> str:
    """Show only the last four characters of a stored credential."""
    if not value:
        return ""
    if len(value) <= 8:
        return "***"
    return f"***{value[-4:]}"


@router.get("/repos", response_model=List[Repository])
async def list_repositories(github: GitHubClientProtocol = Depends(get_github_client)):
    """List the signed-in user's repositories, most recently updated first."""
    try:
        return await github.list_repositories()
    except GitHubError as e:
        raise _http_error(e, "Failed to fetch repositories")


@router.get("/branches", response_model=List[Branch])
async def list_branches(
    owner: str = Query(default=""),
    repo: str = Query(default=""),
    github: GitHubClientProtocol = Depends(get_github_client),
):
    if not owner or not repo:
        raise HTTPException(status_code=400, detail="Owner and repo are required")
    try:
        return await github.list_branches(owner, repo)
    except GitHubError as e:
        raise _http_error(e, "Failed to fetch branches")


@router.post("/diff", response_model=DiffResponse)
async def generate_description(
    request: DiffRequest,
    coordinator: DescriptionCoordinator = Depends(get_description_coordinator),
    api_key: str = Depends(get_gemini_api_key),
):
    """Compare two branches and draft a pull request description."""
    try:
        return await coordinator.describe(
            owner=request.owner,
            repo=request.repo,
            base=request.base_branch,
            head=request.target_branch,
            mode=request.mode,
            fmt=request.format,
            api_key=api_key,
        )
    except GitHubError as e:
        raise _http_error(e, "Failed to generate diff analysis")


@router.post("/create-pr", response_model=PullRequestResult)
async def create_pull_request(
    request: CreatePullRequest,
    github: GitHubClientProtocol = Depends(get_github_client),
):
    try:
        return await github.create_pull_request(
            owner=request.owner,
            repo=request.repo,
            title=request.title,
            body=request.body,
            head=request.head,
            base=request.base,
        )
    except GitHubError as e:
        raise _http_error(e, "Failed to create pull request")


@router.get("/github/user", response_model=GitHubUser)
async def get_github_user(github: GitHubClientProtocol = Depends(get_github_client)):
    try:
        return await github.get_user()
    except GitHubError as e:
        raise _http_error(e, "Failed to fetch GitHub user details")


# The settings handlers stay sync so they run in the threadpool: the store
# blocks on the database and on PBKDF2.
@router.get("/settings", response_model=SettingsResponse)
def get_user_settings(settings: UserSettingsData = Depends(get_user_credentials)):
    return SettingsResponse(
        gemini_api_key=mask_secret(settings.gemini_api_key),
        github_pat_token=mask_secret(settings.github_pat_token),
        gemini_configured=bool(settings.gemini_api_key),
        github_configured=bool(settings.github_pat_token),
        gemini_key_expires_at=settings.gemini_key_expires_at,
        github_token_expires_at=settings.github_token_expires_at,
    )


@router.post("/settings")
def save_user_settings(
    update: SettingsUpdate,
    user: SessionUser = Depends(get_current_user),
    store: UserSettingsStore = Depends(get_settings_store),
):
    data = UserSettingsData(
        gemini_api_key=update.gemini_api_key or "",
        github_pat_token=update.github_pat_token or "",
        gemini_key_expires_at=update.gemini_key_expires_at,
        github_token_expires_at=update.github_token_expires_at,
    )
    try:
        saved = store.save(user.email, data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EncryptionError:
        raise HTTPException(status_code=500, detail="Failed to save settings")

    if not saved:
        raise HTTPException(status_code=500, detail="Failed to save settings")
    return {"success": True}
