import logging
from typing import Any, List, Optional

import httpx

from .models import UNKNOWN_DATE, SearchCredentials, Study
from .utils import borrow_client, clamp_max_results

logger = logging.getLogger(__name__)

S2_SEARCH_URL = "https://api.semanticscholar.org/graph/v1/paper/search"
S2_PAPER_PAGE_URL = "https://www.semanticscholar.org/paper"
S2_FIELDS = "title,authors,abstract,url,year,externalIds"
S2_MAX_LIMIT = 100


async def search_semantic_scholar(
    query: str,
    max_results: int,
    credentials: Optional[SearchCredentials] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[Study]:
    """Search the Semantic Scholar graph API. Any failure yields an empty list."""
    limit = min(clamp_max_results(max_results, "Semantic Scholar"), S2_MAX_LIMIT)

    headers = {}
    # the API key only ever travels as a header
    if credentials and credentials.semantic_scholar_api_key:
        headers["x-api-key"] = credentials.semantic_scholar_api_key

    try:
        async with borrow_client(client) as http:
            response = await http.get(
                S2_SEARCH_URL,
                params={"query": query, "limit": limit, "fields": S2_FIELDS},
                headers=headers,
            )
        response.raise_for_status()

        studies = [_parse_paper(paper) for paper in response.json().get("data") or []]
    except Exception as exc:
        logger.error("Error searching Semantic Scholar for %r: %s", query, exc)
        return []

    logger.info("Semantic Scholar returned %d studies for %r", len(studies), query)
    return studies


def _parse_paper(paper: dict[str, Any]) -> Study:
    authors = [
        author["name"]
        for author in paper.get("authors") or []
        if isinstance(author, dict) and author.get("name")
    ]

    year = paper.get("year")
    external_ids = paper.get("externalIds") or {}

    return Study(
        title=paper.get("title"),
        authors=authors,
        abstract=paper.get("abstract"),
        url=paper.get("url") or f"{S2_PAPER_PAGE_URL}/{paper.get('paperId') or ''}",
        publish_date=str(year) if year else UNKNOWN_DATE,
        source="semantic-scholar",
        doi=external_ids.get("DOI"),
        arxiv_id=external_ids.get("ArXiv"),
        pmid=external_ids.get("PubMed"),
    )
