import importlib.util
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from src.apps.api import router
from src.apps.auth import router as auth_router
from src.config.logging_config import configure_logging
from src.config.settings import get_settings
from src.dependencies import (
    GitHubClientFactory,
    build_cipher,
    get_github_client_factory,
)

settings = get_settings()
configure_logging(settings.DEBUG)
logger = logging.getLogger(__name__)

# --- 依存性定義 ---


def get_mock_github_client_factory() -> GitHubClientFactory:
    """デバッグ用のMockGitHubClientを作るファクトリを返します。"""
    # モックは main.py のDEBUGブロック内でインポートされます
    from mocks.github_client import MockGitHubClient

    logger.debug("DEBUG mode: Using MockGitHubClient (via DI Override)")
    return lambda token: MockGitHubClient(token)


# --- アプリケーション初期化 ---


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ENCRYPTION_KEYが無効なら起動を中止します
    build_cipher(settings.ENCRYPTION_KEY, settings.KDF_ITERATIONS)
    logger.info("Credential encryption configured")
    yield


app = FastAPI(
    title="PR Draft API",
    version="0.1.0",
    description="Draft pull request descriptions from GitHub branch comparisons",
    lifespan=lifespan,
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    max_age=settings.SESSION_MAX_AGE,
    https_only=settings.SESSION_HTTPS_ONLY,
)

# --- DEBUG設定に基づきDIの上書きを設定 ---

if settings.DEBUG:
    dev_path = Path(__file__).parent.parent / "dev"
    if dev_path.exists():
        sys.path.append(str(dev_path))
        logger.info("'dev' directory added to sys.path for mock imports.")
        if importlib.util.find_spec("mocks.github_client") is not None:
            app.dependency_overrides[get_github_client_factory] = (
                get_mock_github_client_factory
            )
        else:
            logger.warning("MockGitHubClient not found, using real GitHubClient.")
    else:
        logger.warning("'dev' directory not found. Using real GitHubClient.")

app.include_router(auth_router.router)
app.include_router(router.router, prefix="/api")


@app.get("/health")
async def health_check():
    """
    Simple health check endpoint to confirm the API is running.
    """
    return {"status": "ok"}
