from __future__ import annotations

from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .collector import collect_research
from .config import load_config
from .federated_search import search_all
from .llm_orchestrator import LLMAcquisitionError, analyze_note
from .models import (
    AnalysisResult,
    CollectRequest,
    CollectionReport,
    SearchRequest,
    Study,
)

app = FastAPI(
    title="Research Collector",
    description="Turn notes into research queries and search arXiv, PubMed and Semantic Scholar",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten in real deployments
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_content(note_content: str):
    if not note_content.strip():
        raise HTTPException(status_code=400, detail="Note content is empty")


@app.get("/health", tags=["meta"])
async def health():
    return {"status": "ok"}


@app.post("/analyze", response_model=AnalysisResult, tags=["research"])
async def analyze(request: CollectRequest):
    _require_content(request.note_content)
    config = load_config()

    try:
        return await analyze_note(request.note_content, config)
    except LLMAcquisitionError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@app.post("/search", response_model=List[Study], tags=["research"])
async def search(request: SearchRequest):
    config = load_config()

    return await search_all(
        request.queries,
        request.source or config.default_source,
        request.max_results or config.max_results,
        config.credentials(),
        timeout=config.request_timeout,
    )


@app.post("/collect", response_model=CollectionReport, tags=["research"])
async def collect(request: CollectRequest):
    _require_content(request.note_content)
    config = load_config()

    try:
        return await collect_research(
            request.note_content,
            request.note_title,
            config,
            source=request.source,
            max_results=request.max_results,
        )
    except LLMAcquisitionError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
