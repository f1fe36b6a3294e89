"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from models.research import ExtractedPage, RepoAnalysis, SearchResult


class ErrorDTO(BaseModel):
    error: str


class EndpointDTO(BaseModel):
    price: str
    description: str


class ServiceInfoDTO(BaseModel):
    service: str
    version: str
    mode: str
    network: str | None = None
    endpoints: dict[str, EndpointDTO]


class SearchResultDTO(BaseModel):
    title: str | None = None
    url: str | None = None
    snippet: str | None = None


class SearchResponseDTO(BaseModel):
    query: str
    count: int
    results: list[SearchResultDTO]

    @classmethod
    def from_results(cls, query: str, results: list[SearchResult]):
        return cls(
            query=query,
            count=len(results),
            results=[SearchResultDTO(**r.to_dict()) for r in results],
        )


class FetchResponseDTO(BaseModel):
    url: str
    extracted: str
    truncated: bool

    @classmethod
    def from_page(cls, page: ExtractedPage):
        return cls(**page.to_dict())


class CommitDTO(BaseModel):
    sha: str
    message: str
    author: Any = None
    date: Any = None


class RepoAnalysisDTO(BaseModel):
    # GitHub metadata is passed through verbatim, whatever its type
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
    recent_commits: list[CommitDTO] = Field(default_factory=list)


class AnalyzeResponseDTO(BaseModel):
    analysis: RepoAnalysisDTO

    @classmethod
    def from_analysis(cls, analysis: RepoAnalysis):
        return cls(analysis=RepoAnalysisDTO(**analysis.to_dict()))
