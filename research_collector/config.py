from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .models import SearchCredentials, SourceSelection

DEFAULT_PROMPT_TEMPLATE = """Based on the following note content, identify key research topics and suggest relevant search queries for finding related academic research:

{NOTE_CONTENT}

Please provide:
1. Main research topics (3-5 topics)
2. Suggested search queries for each topic
3. Any trends or connections you notice

Format your response as JSON with the structure:
{
  "topics": ["topic1", "topic2", ...],
  "queries": ["query1", "query2", ...],
  "trends": "brief analysis"
}"""


class ResearchConfig(BaseModel):
    llm_backend: Literal["cli", "api"] = "cli"
    claude_code_path: str = "claude"
    openai_model: str = "gpt-4o-mini"
    llm_timeout: float = Field(default=120.0, gt=0)
    request_timeout: float = Field(default=30.0, gt=0)
    default_source: SourceSelection = "arxiv"
    max_results: int = Field(default=10, gt=0)
    semantic_scholar_api_key: Optional[str] = None
    pubmed_email: Optional[str] = None
    prompt_template: str = DEFAULT_PROMPT_TEMPLATE

    def credentials(self) -> SearchCredentials:
        return SearchCredentials(
            semantic_scholar_api_key=self.semantic_scholar_api_key,
            pubmed_email=self.pubmed_email,
        )


def load_config() -> ResearchConfig:
    """Build a fresh config from environment variables (unset ones keep their defaults)."""
    values = {
        "llm_backend": os.getenv("LLM_BACKEND"),
        "claude_code_path": os.getenv("CLAUDE_CODE_PATH"),
        "openai_model": os.getenv("OPENAI_MODEL"),
        "llm_timeout": os.getenv("LLM_TIMEOUT"),
        "request_timeout": os.getenv("REQUEST_TIMEOUT"),
        "default_source": os.getenv("DEFAULT_RESEARCH_SOURCE"),
        "max_results": os.getenv("MAX_RESULTS"),
        "semantic_scholar_api_key": os.getenv("SEMANTIC_SCHOLAR_API_KEY"),
        "pubmed_email": os.getenv("PUBMED_EMAIL"),
    }

    template_file = os.getenv("PROMPT_TEMPLATE_FILE")
    if template_file:
        values["prompt_template"] = Path(template_file).read_text(encoding="utf-8")

    return ResearchConfig(**{key: value for key, value in values.items() if value})
