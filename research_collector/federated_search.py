"""Fan queries out to the bibliographic sources and merge the results.

Queries run one after another; for each query the selected sources are
searched concurrently, so at most one request per source is in flight.
Results are concatenated in a fixed source order, whatever order the
responses arrive in, then deduplicated by case-insensitive title.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import httpx

from .arxiv_client import search_arxiv
from .models import ALL_SOURCES, SearchCredentials, SourceSelection, Study
from .pubmed_client import search_pubmed
from .semantic_scholar_client import search_semantic_scholar
from .utils import DEFAULT_TIMEOUT, borrow_client

logger = logging.getLogger(__name__)

SourceAdapter = Callable[..., Awaitable[List[Study]]]

# Dict order is the concatenation order for "all".
SOURCE_ADAPTERS: Dict[str, SourceAdapter] = {
    "arxiv": search_arxiv,
    "pubmed": search_pubmed,
    "semantic-scholar": search_semantic_scholar,
}


async def search_all(
    queries: Iterable[str],
    selection: SourceSelection,
    max_results: int,
    credentials: Optional[SearchCredentials] = None,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[Study]:
    """Run every query against the selected source(s) and return deduplicated studies."""
    credentials = credentials or SearchCredentials()
    queries = list(queries)
    all_studies: List[Study] = []

    async with borrow_client(client, timeout=timeout) as http:
        for query in queries:
            if selection == ALL_SOURCES:
                studies = await _search_every_source(query, max_results, credentials, http)
            elif selection in SOURCE_ADAPTERS:
                studies = await _run_adapter(selection, query, max_results, credentials, http)
            else:
                logger.warning("Unknown research source %r, skipping query %r", selection, query)
                studies = []

            all_studies.extend(studies)

    unique = deduplicate_studies(all_studies)
    logger.info(
        "Searched %d queries on %s: %d studies, %d after deduplication",
        len(queries),
        selection,
        len(all_studies),
        len(unique),
    )
    return unique


async def _search_every_source(
    query: str,
    max_results: int,
    credentials: SearchCredentials,
    client: httpx.AsyncClient,
) -> List[Study]:
    names = list(SOURCE_ADAPTERS)
    results = await asyncio.gather(
        *(SOURCE_ADAPTERS[name](query, max_results, credentials, client) for name in names),
        return_exceptions=True,
    )

    studies: List[Study] = []
    for name, result in zip(names, results):
        if isinstance(result, BaseException):
            logger.error("%s search failed for %r: %s", name, query, result)
            continue
        studies.extend(result)
    return studies


async def _run_adapter(
    name: str,
    query: str,
    max_results: int,
    credentials: SearchCredentials,
    client: httpx.AsyncClient,
) -> List[Study]:
    try:
        return await SOURCE_ADAPTERS[name](query, max_results, credentials, client)
    except Exception as exc:
        logger.error("%s search failed for %r: %s", name, query, exc)
        return []


def deduplicate_studies(studies: Iterable[Study]) -> List[Study]:
    """Keep the first study for each lower-cased title.

    Later duplicates are dropped even when they come from another source or
    carry more identifiers; two distinct papers that share a title collapse
    into one.
    """
    seen: set[str] = set()
    unique: List[Study] = []
    for study in studies:
        key = study.normalized_title
        if key in seen:
            continue
        seen.add(key)
        unique.append(study)
    return unique
