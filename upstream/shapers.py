"""Pure functions turning raw upstream bodies into public response shapes."""

import re
from collections.abc import Mapping
from typing import Any

from models.research import (
    EXTRACT_CEILING_CHARS,
    EXTRACT_PREVIEW_CHARS,
    CommitSummary,
    ExtractedPage,
    RepoAnalysis,
    SearchResult,
)

COMMIT_SHA_CHARS = 7

_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


class ShapingError(ValueError):
    """Raised when an upstream body cannot be mapped at all."""


def _field(data: Any, key: str) -> Any:
    """Read ``key`` from a JSON object, treating any non-object as absent."""
    if isinstance(data, Mapping):
        return data.get(key)
    return None


def shape_search(raw: Any) -> list[SearchResult]:
    """
    Map ``raw.web.results`` to search results; absent at any level is empty.

    Raises:
        ShapingError: If ``results`` is present but not a list
    """
    results = _field(_field(raw, "web"), "results")
    if results is None:
        return []
    if not isinstance(results, list):
        raise ShapingError(f"Unexpected search results from provider: {type(results).__name__}")
    return [
        SearchResult(
            title=_field(item, "title"),
            url=_field(item, "url"),
            snippet=_field(item, "description"),
        )
        for item in results
    ]


def extract_text(raw_html: str) -> str:
    """Strip scripts, styles and tags, collapse whitespace, cap at the ceiling."""
    text = _SCRIPT_RE.sub("", raw_html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return text[:EXTRACT_CEILING_CHARS]


def shape_extract(url: str, raw_html: str) -> ExtractedPage:
    """
    Build the extraction preview for a fetched page.

    ``truncated`` compares the ceiling-capped text against the preview length,
    so it is True whenever more than the preview survived the first cut.
    """
    capped = extract_text(raw_html)
    return ExtractedPage(
        url=url,
        extracted=capped[:EXTRACT_PREVIEW_CHARS],
        truncated=len(capped) > EXTRACT_PREVIEW_CHARS,
    )


def _shape_commit(item: Any) -> CommitSummary:
    commit = _field(item, "commit")
    author = _field(commit, "author")
    sha = _field(item, "sha")
    message = _field(commit, "message")
    if not isinstance(sha, str) or not isinstance(message, str):
        raise ShapingError("Malformed commit entry in GitHub response")
    return CommitSummary(
        sha=sha[:COMMIT_SHA_CHARS],
        message=message.split("\n")[0],
        author=_field(author, "name"),
        date=_field(author, "date"),
    )


def shape_repo_analysis(repo_data: Any, lang_data: Any, commits_data: Any) -> RepoAnalysis:
    """
    Merge the three GitHub bodies into one analysis.

    Repository and language bodies are not checked for error payloads; only
    a commits body that is not a list fails the whole analysis.

    Raises:
        ShapingError: If ``commits_data`` is not a list of commits
    """
    if not isinstance(commits_data, list):
        message = _field(commits_data, "message") or type(commits_data).__name__
        raise ShapingError(f"Unexpected commits response from GitHub: {message}")

    return RepoAnalysis(
        name=_field(repo_data, "name"),
        full_name=_field(repo_data, "full_name"),
        description=_field(repo_data, "description"),
        stars=_field(repo_data, "stargazers_count"),
        forks=_field(repo_data, "forks_count"),
        open_issues=_field(repo_data, "open_issues_count"),
        language=_field(repo_data, "language"),
        languages=dict(lang_data) if isinstance(lang_data, Mapping) else None,
        created_at=_field(repo_data, "created_at"),
        updated_at=_field(repo_data, "updated_at"),
        license=_field(_field(repo_data, "license"), "name"),
        topics=_field(repo_data, "topics"),
        recent_commits=[_shape_commit(item) for item in commits_data],
    )
