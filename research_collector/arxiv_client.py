import logging
from typing import List, Optional

import httpx

from xml.etree import ElementTree as ET

from .models import SearchCredentials, Study
from .utils import borrow_client, clamp_max_results, element_text

logger = logging.getLogger(__name__)

ARXIV_API_URL = "http://export.arxiv.org/api/query"

NAMESPACES = {
    "atom": "http://www.w3.org/2005/Atom",
    "arxiv": "http://arxiv.org/schemas/atom",
}


async def search_arxiv(
    query: str,
    max_results: int,
    credentials: Optional[SearchCredentials] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[Study]:
    """Search arXiv and normalize the Atom feed. Any failure yields an empty list."""
    max_results = clamp_max_results(max_results, "arXiv")

    try:
        async with borrow_client(client) as http:
            response = await http.get(
                ARXIV_API_URL,
                params={
                    "search_query": f"all:{query}",
                    "start": 0,
                    "max_results": max_results,
                },
            )
        response.raise_for_status()

        studies = parse_atom_feed(response.text)
    except Exception as exc:
        logger.error("Error searching arXiv for %r: %s", query, exc)
        return []

    logger.info("arXiv returned %d studies for %r", len(studies), query)
    return studies


def parse_atom_feed(xml_text: str) -> List[Study]:
    root = ET.fromstring(xml_text)

    studies: List[Study] = []
    for entry in root.findall("atom:entry", NAMESPACES):
        entry_id = element_text(entry.find("atom:id", NAMESPACES))
        published = element_text(entry.find("atom:published", NAMESPACES))

        authors = []
        for name_elem in entry.findall("atom:author/atom:name", NAMESPACES):
            name = element_text(name_elem)
            if name:
                authors.append(name)

        studies.append(
            Study(
                title=element_text(entry.find("atom:title", NAMESPACES)),
                authors=authors,
                abstract=element_text(entry.find("atom:summary", NAMESPACES)),
                url=entry_id,
                publish_date=published.split("T")[0],
                source="arxiv",
                doi=element_text(entry.find("arxiv:doi", NAMESPACES)),
                arxiv_id=entry_id.split("/")[-1],
            )
        )

    return studies
