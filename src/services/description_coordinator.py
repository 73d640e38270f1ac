"""Coordinates drafting a pull request description for a branch comparison."""

import logging
from typing import Any, Callable

from src.config.settings import Settings
from src.protocols.github_client_protocol import GitHubClientProtocol
from src.schemas import (
    Comparison,
    DescriptionFormat,
    DescriptionMode,
    DiffResponse,
    DiffStats,
)

from .categorizer import categorize
from .llm import build_prompt, create_client, generate_with_fallback

logger = logging.getLogger(__name__)


def compute_stats(comparison: Comparison) -> DiffStats:
    return DiffStats(
        total_files=len(comparison.files),
        total_additions=sum(change.additions for change in comparison.files),
        total_deletions=sum(change.deletions for change in comparison.files),
        commits=len(comparison.commits),
    )


class DescriptionCoordinator:
    """Fetches a comparison and drafts its description, model first, rules second."""

    def __init__(
        self,
        github: GitHubClientProtocol,
        settings: Settings,
        llm_client_factory: Callable[[str], Any] = create_client,
    ):
        self.github = github
        self.settings = settings
        self.llm_client_factory = llm_client_factory

    def _fallback(self, comparison: Comparison) -> DiffResponse:
        return DiffResponse(
            description=categorize(comparison.files),
            file_changes=comparison.files,
            stats=compute_stats(comparison),
            fallback=True,
        )

    async def describe(
        self,
        owner: str,
        repo: str,
        base: str,
        head: str,
        mode: DescriptionMode = DescriptionMode.PATCH,
        fmt: DescriptionFormat = DescriptionFormat.CATEGORIZED,
        api_key: str = "",
    ) -> DiffResponse:
        comparison = await self.github.compare(owner, repo, base, head)

        if mode == DescriptionMode.ALGO:
            return self._fallback(comparison)
        if not api_key:
            logger.info("No Gemini API key available, using rule-based description")
            return self._fallback(comparison)
        if mode == DescriptionMode.COMMIT and not comparison.commits:
            return self._fallback(comparison)

        prompt = build_prompt(
            comparison, mode, fmt, patch_preview_chars=self.settings.PATCH_PREVIEW_CHARS
        )
        result = await generate_with_fallback(
            self.llm_client_factory(api_key),
            self.settings.GEMINI_MODELS,
            prompt,
            temperature=self.settings.LLM_TEMPERATURE,
            max_output_tokens=self.settings.LLM_MAX_OUTPUT_TOKENS,
        )
        if result.exhausted or not result.text:
            return self._fallback(comparison)

        return DiffResponse(
            description=result.text.strip(),
            file_changes=comparison.files,
            stats=compute_stats(comparison),
            used_model=result.used_model,
        )
