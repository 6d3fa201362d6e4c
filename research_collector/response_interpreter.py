"""Turn free-form LLM output into an AnalysisResult.

The model is asked for JSON, but nothing guarantees it answers that way, so a
line-scanning fallback picks topics, queries and trends out of prose and
numbered lists. Neither path raises.
"""
from __future__ import annotations

import json
import logging
import re
from typing import List, Optional

from .models import NO_TRENDS, AnalysisResult

logger = logging.getLogger(__name__)

MAX_ITEMS = 5
MAX_TRENDS_CHARS = 500

_JSON_BLOCK_RE = re.compile(r"\{[\s\S]*\}")
_BULLET_RE = re.compile(r"^[-*•\d.)\]]+\s*")


def interpret(raw_text: str, original_content: str) -> AnalysisResult:
    response = (raw_text or "").strip()

    structured = _parse_structured(response)
    if structured is not None:
        return structured

    return _extract_manually(response, original_content or "")


def _parse_structured(response: str) -> Optional[AnalysisResult]:
    match = _JSON_BLOCK_RE.search(response)
    if not match:
        return None

    try:
        data = json.loads(match.group(0))
    except ValueError as exc:
        logger.warning("LLM response contained a brace block that is not JSON: %s", exc)
        return None

    if not isinstance(data, dict):
        return None

    topics = data.get("topics") or []
    queries = data.get("queries") or []
    if not isinstance(topics, list) or not isinstance(queries, list):
        logger.warning("LLM JSON has unexpected topics/queries shape, using fallback extraction")
        return None

    return AnalysisResult(
        topics=[str(t) for t in topics][:MAX_ITEMS],
        queries=[str(q) for q in queries][:MAX_ITEMS],
        trends=str(data.get("trends") or NO_TRENDS),
    )


def _extract_manually(response: str, original_content: str) -> AnalysisResult:
    topics: List[str] = []
    queries: List[str] = []
    trends = ""
    section = None

    for line in response.split("\n"):
        if not line.strip():
            continue

        lower = line.lower()
        if ":" in lower:
            if "topic" in lower:
                section = "topics"
                continue
            if "quer" in lower:
                section = "queries"
                continue
            if "trend" in lower:
                section = "trends"
                continue

        if section in ("topics", "queries"):
            cleaned = _BULLET_RE.sub("", line.strip()).strip()
            if len(cleaned) > 2:
                (topics if section == "topics" else queries).append(cleaned)
        elif section == "trends":
            trends += line + " "

    if not queries:
        query = fallback_query(original_content)
        if query:
            queries.append(query)

    if not topics and queries:
        topics.extend(queries[:3])

    return AnalysisResult(
        topics=topics[:MAX_ITEMS],
        queries=queries[:MAX_ITEMS],
        trends=trends.strip() or response[:MAX_TRENDS_CHARS],
    )


def fallback_query(original_content: str) -> str:
    """Build a single keyword query from the longer words of the note itself."""
    words = [word for word in original_content.split() if len(word) > 4][:50]
    return " ".join(words[:10])
