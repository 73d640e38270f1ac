from functools import lru_cache
from typing import AsyncGenerator, Callable

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from src.config.settings import Settings, get_settings
from src.db.database import create_db_session
from src.protocols.github_client_protocol import GitHubClientProtocol
from src.schemas import SessionUser, UserSettingsData
from src.services import (
    CredentialCipher,
    DescriptionCoordinator,
    GitHubClient,
    GitHubOAuth,
    UserSettingsStore,
)

SESSION_USER_KEY = "user"


@lru_cache
def build_cipher(master_secret: str, iterations: int) -> CredentialCipher:
    """Raises ValueError for an empty secret or too few iterations."""
    return CredentialCipher(master_secret, iterations=iterations)


def get_current_user(request: Request) -> SessionUser:
    data = request.session.get(SESSION_USER_KEY)
    if not data:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return SessionUser.model_validate(data)


def get_cipher(settings: Settings = Depends(get_settings)) -> CredentialCipher:
    try:
        return build_cipher(settings.ENCRYPTION_KEY, settings.KDF_ITERATIONS)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))


def get_settings_store(
    db: Session = Depends(create_db_session),
    cipher: CredentialCipher = Depends(get_cipher),
    settings: Settings = Depends(get_settings),
) -> UserSettingsStore:
    return UserSettingsStore(
        session=db, cipher=cipher, credential_ttl_days=settings.CREDENTIAL_TTL_DAYS
    )


def get_user_credentials(
    user: SessionUser = Depends(get_current_user),
    store: UserSettingsStore = Depends(get_settings_store),
) -> UserSettingsData:
    """Decrypted credentials of the signed-in user, loaded once per request."""
    return store.get(user.email)


def get_oauth(settings: Settings = Depends(get_settings)) -> GitHubOAuth:
    return GitHubOAuth(
        client_id=settings.GITHUB_CLIENT_ID,
        client_secret=settings.GITHUB_CLIENT_SECRET,
        redirect_url=settings.OAUTH_REDIRECT_URL,
        oauth_url=settings.GITHUB_OAUTH_URL,
        timeout=settings.REQUEST_TIMEOUT,
    )


def get_github_token(
    user: SessionUser = Depends(get_current_user),
    credentials: UserSettingsData = Depends(get_user_credentials),
    cipher: CredentialCipher = Depends(get_cipher),
) -> str:
    """A stored personal access token takes precedence over the OAuth token."""
    if credentials.github_pat_token:
        return credentials.github_pat_token

    token = cipher.decrypt(user.sealed_access_token, user.email)
    if not token:
        raise HTTPException(status_code=401, detail="Session expired, sign in again")
    return token


GitHubClientFactory = Callable[[str], GitHubClientProtocol]


def get_github_client_factory(
    settings: Settings = Depends(get_settings),
) -> GitHubClientFactory:
    """本番用のGitHubClientを作るファクトリを返します。"""

    def factory(token: str) -> GitHubClientProtocol:
        return GitHubClient(
            token, base_url=settings.GITHUB_API_URL, timeout=settings.REQUEST_TIMEOUT
        )

    return factory


async def get_github_client(
    token: str = Depends(get_github_token),
    factory: GitHubClientFactory = Depends(get_github_client_factory),
) -> AsyncGenerator[GitHubClientProtocol, None]:
    client = factory(token)
    try:
        yield client
    finally:
        await client.aclose()


def get_gemini_api_key(
    credentials: UserSettingsData = Depends(get_user_credentials),
    settings: Settings = Depends(get_settings),
) -> str:
    """A stored Gemini key takes precedence over the environment default."""
    return credentials.gemini_api_key or settings.GEMINI_API_KEY


# Service層は、先行するClient層のDI（Getter）に依存する
def get_description_coordinator(
    github: GitHubClientProtocol = Depends(get_github_client),
    settings: Settings = Depends(get_settings),
) -> DescriptionCoordinator:
    return DescriptionCoordinator(github=github, settings=settings)
