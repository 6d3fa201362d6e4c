import logging
import re
from typing import List, Optional

import httpx

from xml.etree import ElementTree as ET

from .models import SearchCredentials, Study
from .utils import borrow_client, clamp_max_results, element_text

logger = logging.getLogger(__name__)

EUTILS_BASE_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
ESEARCH_URL = f"{EUTILS_BASE_URL}/esearch.fcgi"
EFETCH_URL = f"{EUTILS_BASE_URL}/efetch.fcgi"

_YEAR_RE = re.compile(r"\d{4}")


def _with_email(params: dict, email: Optional[str]) -> dict:
    # NCBI grants friendlier rate limits to callers that identify themselves.
    if email:
        params["email"] = email
    return params


async def _pubmed_search_ids(
    client: httpx.AsyncClient, query: str, max_results: int, email: Optional[str]
) -> list[str]:
    """Search PubMed for PMIDs matching the query."""
    response = await client.get(
        ESEARCH_URL,
        params=_with_email(
            {
                "db": "pubmed",
                "term": query,
                "retmax": max_results,
                "retmode": "json",
            },
            email,
        ),
    )
    response.raise_for_status()

    return response.json().get("esearchresult", {}).get("idlist", []) or []


async def _pubmed_fetch_articles(
    client: httpx.AsyncClient, pmids: list[str], email: Optional[str]
) -> List[Study]:
    """Fetch full records for PMIDs as XML and normalize them."""
    response = await client.get(
        EFETCH_URL,
        params=_with_email(
            {
                "db": "pubmed",
                "id": ",".join(pmids),
                "retmode": "xml",
            },
            email,
        ),
    )
    response.raise_for_status()

    return parse_pubmed_xml(response.text)


async def search_pubmed(
    query: str,
    max_results: int,
    credentials: Optional[SearchCredentials] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[Study]:
    """
    Two-step PubMed search: esearch for PMIDs, then efetch for the records.
    No fetch is issued when the search finds nothing. Any failure yields an empty list.
    """
    max_results = clamp_max_results(max_results, "PubMed")
    email = credentials.pubmed_email if credentials else None

    try:
        async with borrow_client(client) as http:
            pmids = await _pubmed_search_ids(http, query, max_results, email)
            if not pmids:
                logger.info("PubMed returned no PMIDs for %r", query)
                return []

            studies = await _pubmed_fetch_articles(http, pmids, email)
    except Exception as exc:
        logger.error("Error searching PubMed for %r: %s", query, exc)
        return []

    logger.info("PubMed returned %d studies for %r", len(studies), query)
    return studies


def parse_pubmed_xml(xml_text: str) -> List[Study]:
    root = ET.fromstring(xml_text)

    studies: List[Study] = []
    for article in root.iter("PubmedArticle"):
        pmid = element_text(article.find(".//PMID"))

        authors = []
        for author in article.iter("Author"):
            last_name = element_text(author.find("LastName"))
            fore_name = element_text(author.find("ForeName"))
            # authors missing either part are skipped entirely
            if last_name and fore_name:
                authors.append(f"{fore_name} {last_name}")

        studies.append(
            Study(
                title=element_text(article.find(".//ArticleTitle")),
                authors=authors,
                abstract=element_text(article.find(".//AbstractText")),
                url=f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/",
                publish_date=_publication_year(article),
                source="pubmed",
                pmid=pmid,
                doi=element_text(article.find(".//ArticleId[@IdType='doi']")),
            )
        )

    return studies


def _publication_year(article: ET.Element) -> str:
    year = element_text(article.find(".//PubDate/Year"))
    if _YEAR_RE.fullmatch(year):
        return year

    # e.g. <MedlineDate>2019 Nov-Dec</MedlineDate>
    match = _YEAR_RE.search(element_text(article.find(".//PubDate/MedlineDate")))
    return match.group(0) if match else ""
