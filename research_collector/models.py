from __future__ import annotations

import re
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

StudySource = Literal["arxiv", "pubmed", "semantic-scholar"]
SourceSelection = Literal["arxiv", "pubmed", "semantic-scholar", "all"]

ALL_SOURCES = "all"
NO_TITLE = "No title"
NO_ABSTRACT = "No abstract available"
NO_TRENDS = "No trend analysis available"
UNKNOWN_DATE = "Unknown"

_WHITESPACE_RE = re.compile(r"\s+")


def _collapse(value, fallback: str) -> str:
    if value is None:
        return fallback
    text = _WHITESPACE_RE.sub(" ", str(value)).strip()
    return text or fallback


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    topics: List[str] = Field(default_factory=list)
    queries: List[str] = Field(default_factory=list)
    trends: str = ""


class Study(BaseModel):
    """A bibliographic record normalized from one upstream response.

    Title and abstract are always strings: missing values become the
    ``NO_TITLE`` / ``NO_ABSTRACT`` sentinels and whitespace runs collapse
    to a single space.
    """

    model_config = ConfigDict(frozen=True)

    title: str = NO_TITLE
    authors: List[str] = Field(default_factory=list)
    abstract: str = NO_ABSTRACT
    url: str = ""
    publish_date: str = UNKNOWN_DATE
    source: StudySource
    doi: Optional[str] = None
    arxiv_id: Optional[str] = None
    pmid: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def _normalize_title(cls, value):
        return _collapse(value, NO_TITLE)

    @field_validator("abstract", mode="before")
    @classmethod
    def _normalize_abstract(cls, value):
        return _collapse(value, NO_ABSTRACT)

    @field_validator("publish_date", mode="before")
    @classmethod
    def _normalize_publish_date(cls, value):
        return _collapse(value, UNKNOWN_DATE)

    @field_validator("url", mode="before")
    @classmethod
    def _normalize_url(cls, value):
        return (value or "").strip()

    @field_validator("doi", "arxiv_id", "pmid", mode="before")
    @classmethod
    def _blank_ids_to_none(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @property
    def normalized_title(self) -> str:
        return self.title.lower()


class SearchCredentials(BaseModel):
    semantic_scholar_api_key: Optional[str] = None
    pubmed_email: Optional[str] = None


class SearchRequest(BaseModel):
    queries: List[str]
    source: Optional[SourceSelection] = None
    max_results: Optional[int] = Field(default=None, gt=0)


class CollectRequest(BaseModel):
    note_content: str
    note_title: str = "Untitled"
    source: Optional[SourceSelection] = None
    max_results: Optional[int] = Field(default=None, gt=0)


class CollectionReport(BaseModel):
    title: str
    topics: List[str] = Field(default_factory=list)
    queries: List[str] = Field(default_factory=list)
    trends: str = ""
    studies: List[Study] = Field(default_factory=list)
