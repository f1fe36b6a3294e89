"""Research endpoints: web search, URL extraction and GitHub analysis."""

from fastapi import APIRouter, Depends, Query, Request, status

from server.dependencies import get_upstream_client
from server.schemas.responses import AnalyzeResponseDTO, FetchResponseDTO, SearchResponseDTO
from server.utils import error_response, redact_sensitive_headers, require_param
from upstream.client import DEFAULT_SEARCH_COUNT, UpstreamClient
from upstream.shapers import shape_extract, shape_repo_analysis, shape_search
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Research"])


def _handler_failed(request: Request, exc: Exception):
    logger.error(
        "Request failed",
        exc_info=True,
        extra={
            "extra_fields": {
                "path": request.url.path,
                "error_type": type(exc).__name__,
                "headers": redact_sensitive_headers(dict(request.headers)),
            }
        },
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


@router.get("/search", response_model=SearchResponseDTO)
async def search(
    request: Request,
    q: str | None = None,
    count: int = Query(DEFAULT_SEARCH_COUNT),
    upstream: UpstreamClient = Depends(get_upstream_client),
):
    """Web search proxied to the search provider."""
    query = require_param(q, "Missing query parameter 'q'")
    try:
        raw = await upstream.search(query, count=count)
        return SearchResponseDTO.from_results(query, shape_search(raw))
    except Exception as e:
        return _handler_failed(request, e)


@router.get("/fetch", response_model=FetchResponseDTO)
async def fetch(
    request: Request,
    url: str | None = None,
    upstream: UpstreamClient = Depends(get_upstream_client),
):
    """Fetch a page and return a plain-text preview of it."""
    target = require_param(url, "Missing URL parameter")
    try:
        raw_html = await upstream.fetch_page(target)
        return FetchResponseDTO.from_page(shape_extract(target, raw_html))
    except Exception as e:
        return _handler_failed(request, e)


@router.get("/analyze-github", response_model=AnalyzeResponseDTO)
async def analyze_github(
    request: Request,
    repo: str | None = None,
    upstream: UpstreamClient = Depends(get_upstream_client),
):
    """
    Summarize a GitHub repository from three independent API calls.

    Repository and language bodies are passed through without checking for
    GitHub error payloads, so an unknown repository can yield an analysis of
    empty fields; only an unusable commits body fails the request.
    """
    name = require_param(repo, "Missing repo parameter (e.g., 'facebook/react')")
    try:
        repo_data, lang_data, commits_data = await upstream.analyze_repo(name)
        analysis = shape_repo_analysis(repo_data, lang_data, commits_data)
        return AnalyzeResponseDTO.from_analysis(analysis)
    except Exception as e:
        return _handler_failed(request, e)
