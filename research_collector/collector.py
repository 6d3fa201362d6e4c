from __future__ import annotations

import logging
from typing import Optional

from .config import ResearchConfig
from .federated_search import search_all
from .llm_orchestrator import analyze_note
from .models import CollectionReport, SourceSelection

logger = logging.getLogger(__name__)


async def collect_research(
    note_content: str,
    note_title: str,
    config: ResearchConfig,
    source: Optional[SourceSelection] = None,
    max_results: Optional[int] = None,
) -> CollectionReport:
    """
    Analyze a note with the LLM, then search the research databases with the
    suggested queries. Only LLM failures propagate; search failures just shrink the result.
    """
    if not note_content or not note_content.strip():
        raise ValueError("Current note is empty. Please add some content first.")

    analysis = await analyze_note(note_content, config)
    logger.info("Found %d search queries. Searching research databases...", len(analysis.queries))

    studies = await search_all(
        analysis.queries,
        source or config.default_source,
        max_results or config.max_results,
        config.credentials(),
        timeout=config.request_timeout,
    )

    return CollectionReport(
        title=note_title,
        topics=analysis.topics,
        queries=analysis.queries,
        trends=analysis.trends,
        studies=studies,
    )
