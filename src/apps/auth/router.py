import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

from src.dependencies import (
    SESSION_USER_KEY,
    GitHubClientFactory,
    get_cipher,
    get_current_user,
    get_github_client_factory,
    get_oauth,
    get_settings_store,
)
from src.schemas import SessionUser
from src.services import (
    CredentialCipher,
    EncryptionError,
    GitHubError,
    GitHubOAuth,
    UserSettingsStore,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

OAUTH_STATE_KEY = "oauth_state"


@router.get("/signin")
async def signin(request: Request, oauth: GitHubOAuth = Depends(get_oauth)):
    """Redirect to GitHub's authorization page."""
    state = secrets.token_urlsafe(16)
    request.session[OAUTH_STATE_KEY] = state
    return RedirectResponse(oauth.build_authorize_url(state), status_code=302)


@router.get("/callback")
async def callback(
    request: Request,
    code: str = "",
    state: str = "",
    oauth: GitHubOAuth = Depends(get_oauth),
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
    store: UserSettingsStore = Depends(get_settings_store),
    cipher: CredentialCipher = Depends(get_cipher),
):
    """Finish the OAuth flow and start a session."""
    expected_state = request.session.pop(OAUTH_STATE_KEY, None)
    if not code or not expected_state or not secrets.compare_digest(state, expected_state):
        raise HTTPException(status_code=400, detail="Invalid OAuth state")

    github = None
    try:
        access_token = await oauth.exchange_code(code)
        github = client_factory(access_token)
        user = await github.get_user()
        email = await github.get_primary_email()
    except GitHubError as e:
        logger.warning("GitHub sign-in failed: %s", e)
        raise HTTPException(status_code=401, detail="GitHub sign-in failed")
    finally:
        if github is not None:
            await github.aclose()

    if not email:
        raise HTTPException(
            status_code=400, detail="GitHub account has no verified email address"
        )

    if not await run_in_threadpool(store.create_empty, email):
        logger.warning("Could not create settings row for %s", user.login)

    try:
        sealed = await run_in_threadpool(cipher.encrypt, access_token, email)
    except (ValidationError, EncryptionError) as e:
        logger.error("Could not seal access token for %s: %s", user.login, e)
        raise HTTPException(status_code=500, detail="GitHub sign-in failed")

    request.session[SESSION_USER_KEY] = SessionUser(
        login=user.login, email=email, sealed_access_token=sealed
    ).model_dump()
    logger.info("User %s signed in", user.login)
    return RedirectResponse("/", status_code=302)


@router.post("/signout")
async def signout(request: Request):
    request.session.clear()
    return {"status": "signed out"}


@router.get("/session")
async def get_session(user: SessionUser = Depends(get_current_user)):
    """The signed-in user, without the access token."""
    return {"login": user.login, "email": user.email}
