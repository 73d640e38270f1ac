"""Pull request description generation with Gemini, trying models in order."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from google import genai
from google.genai import errors
from google.genai.types import GenerateContentConfig

from src.schemas import Comparison, DescriptionFormat, DescriptionMode

logger = logging.getLogger(__name__)

NO_PREAMBLE = (
    "IMPORTANT: Output ONLY the PR description. Do NOT include conversational "
    'phrases like "Here\'s the categorization", "I\'ve grouped", or "Based on the changes".'
)


@dataclass
class GenerateResult:
    text: Optional[str]
    used_model: Optional[str]
    exhausted: bool


def create_client(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


async def generate_with_fallback(
    client: genai.Client,
    models: Sequence[str],
    prompt: str,
    temperature: float = 0.7,
    max_output_tokens: int = 8192,
) -> GenerateResult:
    """
    Ask each model in turn until one returns text.

    Any failure (rate limits, exhausted quota, retired models, network
    errors) and empty responses move on to the next model. When every model
    fails the result has ``exhausted=True`` and no text.
    """
    logger.info("Starting PR description generation with models %s", list(models))

    for model_name in models:
        logger.debug("Trying model %s", model_name)
        try:
            response = await client.aio.models.generate_content(
                model=model_name,
                contents=prompt,
                config=GenerateContentConfig(
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                ),
            )
        except errors.APIError as e:
            logger.info(
                "Model %s failed (status: %s, message: %s), trying next",
                model_name,
                e.code,
                e.message,
            )
            continue
        except Exception as e:
            logger.warning(
                "Model %s failed with %s: %s, trying next",
                model_name,
                type(e).__name__,
                e,
            )
            continue

        text = response.text
        if not text:
            logger.info("Model %s returned no text, trying next", model_name)
            continue

        logger.info("Generation succeeded with %s (%d chars)", model_name, len(text))
        return GenerateResult(text=text, used_model=model_name, exhausted=False)

    logger.warning("All models exhausted, generation failed")
    return GenerateResult(text=None, used_model=None, exhausted=True)


def _format_changes(comparison: Comparison, mode: DescriptionMode, patch_chars: int) -> str:
    if mode == DescriptionMode.COMMIT:
        return "\n".join(commit.message for commit in comparison.commits)
    return "\n---\n".join(
        f"{change.status.value.upper()}: {change.path}\n"
        f"Changes: +{change.additions} -{change.deletions}\n"
        f"{(change.patch or '')[:patch_chars]}"
        for change in comparison.files
    )


def build_prompt(
    comparison: Comparison,
    mode: DescriptionMode,
    fmt: DescriptionFormat,
    patch_preview_chars: int = 1000,
) -> str:
    if mode == DescriptionMode.COMMIT:
        data_type = "commit messages of pull request"
    else:
        data_type = "file diffs of pull request"
    base = _format_changes(comparison, mode, patch_preview_chars)

    if fmt == DescriptionFormat.SIMPLE:
        return f"""You are analyzing {data_type}.

Your task: Create a concise summary focusing on WHAT changed from a user/feature perspective, not technical file details.

Guidelines:
- Focus on features, functionality, and business logic changes
- Avoid listing individual files unless critical
- Group related changes together
- Use clear, non-technical language where possible
- Keep it brief

{NO_PREAMBLE}

{data_type.upper()}:
{base}

Generate a simple bullet-point summary of the key changes."""

    if fmt == DescriptionFormat.CATEGORIZED:
        return f"""You are analyzing {data_type}.

Your task: Categorize changes by their PURPOSE and IMPACT, not by file types or names.

CRITICAL INSTRUCTIONS:
- Group related changes that work together to achieve a feature
- Describe changes in terms of user-facing impact or system behavior
- Describe code-level changes only if necessary to understand the context
- Avoid simply listing file names - explain what those changes accomplish
- Only include categories that have meaningful changes

Categories to use (only include relevant ones):
🚀 **New Features** - New capabilities or functionality added
🛠 **Bug Fixes** - Issues resolved or corrections made
🔧 **Improvements** - Enhancements to existing features
♻️ **Refactoring** - Code restructuring without behavior changes
🎨 **UI/UX Changes** - Visual or user experience updates
📚 **Documentation** - README, comments, or docs updates
🧪 **Testing** - Test additions or modifications
⚙️ **Configuration** - Build, deployment, or config changes

{NO_PREAMBLE}

{data_type.upper()}:
{base}

Analyze these changes and create a categorized description."""

    return f"""You are writing a comprehensive pull request description based on {data_type}.

Your task: Create a detailed PR description that thoroughly explains the changes with sufficient technical depth.

Structure your response with:

## Summary
A clear overview (2-3 sentences) of what this PR accomplishes and the problem it solves.

## Changes Made
- Specific components, functions, or modules that were modified
- New APIs, endpoints, or interfaces introduced
- Database schema changes or data model updates
- Dependencies added or updated

## Technical Details
- Implementation approach and patterns used
- How different parts of the code interact
- Error handling and edge cases addressed

## Impact & Considerations
- Which parts of the codebase are affected
- Breaking changes and migration steps required
- Performance and security considerations
- Testing approach and coverage

{NO_PREAMBLE}

{data_type.upper()}:
{base}

Generate a comprehensive PR description following the structure above."""
