from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from langchain_openai import ChatOpenAI
from langchain_core.messages import HumanMessage

from .config import ResearchConfig
from .models import AnalysisResult
from .response_interpreter import interpret

logger = logging.getLogger(__name__)

NOTE_PLACEHOLDER = "{NOTE_CONTENT}"
MAX_OUTPUT_BYTES = 10 * 1024 * 1024


class LLMAcquisitionError(RuntimeError):
    """Raised when no raw analysis text could be obtained from the LLM."""


@lru_cache(maxsize=None)
def get_llm(model: str) -> ChatOpenAI:
    return ChatOpenAI(model=model, temperature=0.2)


def build_prompt(template: str, note_content: str) -> str:
    return template.replace(NOTE_PLACEHOLDER, note_content, 1)


@contextmanager
def _prompt_file(prompt: str) -> Iterator[Path]:
    """Write the prompt to a temp file owned by one CLI call; always removed afterwards."""
    fd, name = tempfile.mkstemp(prefix="research-collector-prompt-", suffix=".txt")
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fhandle:
            fhandle.write(prompt)
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to delete prompt file %s: %s", path, exc)


async def run_claude_cli(prompt: str, config: ResearchConfig) -> str:
    """Run the Claude Code CLI non-interactively with the prompt on stdin."""
    with _prompt_file(prompt) as prompt_path:
        try:
            with prompt_path.open("rb") as stdin:
                process = await asyncio.create_subprocess_exec(
                    config.claude_code_path,
                    "--print",
                    "--max-turns",
                    "3",
                    stdin=stdin,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
                try:
                    stdout, stderr = await asyncio.wait_for(
                        process.communicate(), timeout=config.llm_timeout
                    )
                except asyncio.TimeoutError:
                    process.kill()
                    await process.wait()
                    raise LLMAcquisitionError(
                        f"Failed to analyze with Claude: timed out after {config.llm_timeout:g}s"
                    )
        except OSError as exc:
            raise LLMAcquisitionError(f"Failed to analyze with Claude: {exc}") from exc

    if len(stdout) > MAX_OUTPUT_BYTES:
        raise LLMAcquisitionError("Failed to analyze with Claude: output exceeded 10MB")

    err_text = stderr.decode("utf-8", errors="replace").strip()
    if process.returncode != 0:
        raise LLMAcquisitionError(
            f"Failed to analyze with Claude: exit code {process.returncode}: {err_text}"
        )
    if err_text and "Warning" not in err_text:
        logger.warning("Claude Code stderr: %s", err_text)

    return stdout.decode("utf-8", errors="replace").strip()


async def run_hosted_llm(prompt: str, config: ResearchConfig) -> str:
    """Ask the hosted chat model for the analysis."""
    try:
        resp = await asyncio.wait_for(
            get_llm(config.openai_model).ainvoke([HumanMessage(content=prompt)]),
            timeout=config.llm_timeout,
        )
    except asyncio.TimeoutError as exc:
        raise LLMAcquisitionError(
            f"LLM API error: timed out after {config.llm_timeout:g}s"
        ) from exc
    except Exception as exc:
        raise LLMAcquisitionError(f"LLM API error: {exc}") from exc

    return str(resp.content).strip()


async def obtain_raw_analysis_text(prompt: str, config: ResearchConfig) -> str:
    if config.llm_backend == "api":
        return await run_hosted_llm(prompt, config)
    return await run_claude_cli(prompt, config)


async def analyze_note(note_content: str, config: ResearchConfig) -> AnalysisResult:
    """
    Ask the LLM for research topics, queries and trends in the note.
    Raises LLMAcquisitionError if the LLM could not be reached; its answer itself is never rejected.
    """
    prompt = build_prompt(config.prompt_template, note_content)
    raw = await obtain_raw_analysis_text(prompt, config)

    analysis = interpret(raw, note_content)
    logger.info(
        "Analysis found %d topics and %d queries", len(analysis.topics), len(analysis.queries)
    )
    return analysis
