"""
Models package for shaped research results.
"""

from .research import CommitSummary, ExtractedPage, RepoAnalysis, SearchResult

__all__ = ["CommitSummary", "ExtractedPage", "RepoAnalysis", "SearchResult"]
