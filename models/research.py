from dataclasses import asdict, dataclass, field
from typing import Any

EXTRACT_CEILING_CHARS = 5000
EXTRACT_PREVIEW_CHARS = 2000


@dataclass(frozen=True)
class SearchResult:
    title: str | None
    url: str | None
    snippet: str | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ExtractedPage:
    url: str
    extracted: str
    truncated: bool

    def __post_init__(self):
        if len(self.extracted) > EXTRACT_PREVIEW_CHARS:
            raise ValueError(f"extracted text exceeds {EXTRACT_PREVIEW_CHARS} characters")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CommitSummary:
    sha: str
    message: str
    author: Any
    date: Any


@dataclass(frozen=True)
class RepoAnalysis:
    """
    Merged view of repository metadata, language histogram and recent commits.

    Metadata fields are passed through from GitHub unchecked, so an error body
    such as ``{"message": "Not Found"}`` yields an analysis full of None.
    """

    name: Any = None
    full_name: Any = None
    description: Any = None
    stars: Any = None
    forks: Any = None
    open_issues: Any = None
    language: Any = None
    languages: dict[str, Any] | None = None
    created_at: Any = None
    updated_at: Any = None
    license: Any = None
    topics: Any = None
    recent_commits: list[CommitSummary] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
