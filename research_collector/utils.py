import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional
from xml.etree.ElementTree import Element

import httpx

from .models import CollectionReport

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10
DEFAULT_TIMEOUT = 30.0


@asynccontextmanager
async def borrow_client(
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or open a short-lived one that is closed on exit."""
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(timeout=timeout) as own_client:
        yield own_client


def clamp_max_results(max_results: Optional[int], source: str) -> int:
    """Non-positive page sizes fall back to the default instead of reaching the provider."""
    if max_results is None or max_results <= 0:
        logger.warning(
            "%s: max_results=%s is not positive, using %d",
            source,
            max_results,
            DEFAULT_MAX_RESULTS,
        )
        return DEFAULT_MAX_RESULTS
    return max_results


def element_text(elem: Optional[Element]) -> str:
    """Full text content of an XML element (including nested markup), stripped."""
    if elem is None:
        return ""
    return "".join(elem.itertext()).strip()


def load_note_text(path: Path) -> str:
    """Load a note file"""
    if not path.exists():
        raise FileNotFoundError(f"File located at: '{path}' does not exist")

    with path.open("r", encoding="utf-8") as f:
        return f.read()


def render_report_markdown(report: CollectionReport) -> str:
    lines = [f"# Research Results for: {report.title}", ""]
    lines.append(f"Found {len(report.studies)} studies")
    lines.append("")

    if report.trends:
        lines += ["## Research Trends Analysis", "", report.trends, ""]

    if not report.studies:
        lines.append("No research papers found. Try adjusting your note content or search parameters.")
        return "\n".join(lines) + "\n"

    lines += ["## Studies", ""]
    for number, study in enumerate(report.studies, start=1):
        lines.append(f"### {number}. [{study.title}]({study.url}) `{study.source.upper()}`")
        if study.authors:
            authors = ", ".join(study.authors[:3])
            if len(study.authors) > 3:
                authors += " et al."
            lines.append(f"- Authors: {authors}")
        lines.append(f"- Published: {study.publish_date}")

        ids = []
        if study.doi:
            ids.append(f"DOI: [{study.doi}](https://doi.org/{study.doi})")
        if study.arxiv_id:
            ids.append(f"arXiv: {study.arxiv_id}")
        if study.pmid:
            ids.append(f"PMID: {study.pmid}")
        if ids:
            lines.append("- " + " | ".join(ids))

        lines += ["", f"> {study.abstract}", ""]

    return "\n".join(lines)
