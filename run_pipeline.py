"""
Pipeline to analyze a note and collect related research studies
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from research_collector.collector import collect_research
from research_collector.config import load_config
from research_collector.llm_orchestrator import LLMAcquisitionError
from research_collector.utils import load_note_text, render_report_markdown

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("pipeline")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Analyze a note and collect related research")
    parser.add_argument("note", type=Path, help="Path to the note (markdown or plain text)")
    parser.add_argument(
        "--source",
        choices=["arxiv", "pubmed", "semantic-scholar", "all"],
        default=None,
        help="Research source to search (default: DEFAULT_RESEARCH_SOURCE or arxiv)",
    )
    parser.add_argument("--max-results", type=int, default=None, help="Results per query and source")
    parser.add_argument("--output", type=Path, default=None, help="Write the report here instead of stdout")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of markdown")
    args = parser.parse_args(argv)

    if args.max_results is not None and args.max_results <= 0:
        parser.error("--max-results must be positive")

    config = load_config()
    note_content = load_note_text(args.note)

    try:
        report = asyncio.run(
            collect_research(
                note_content,
                args.note.stem,
                config,
                source=args.source,
                max_results=args.max_results,
            )
        )
    except (ValueError, LLMAcquisitionError) as exc:
        logger.error("%s", exc)
        return 1

    if args.json:
        rendered = json.dumps(report.model_dump(), ensure_ascii=False, indent=2)
    else:
        rendered = render_report_markdown(report)

    if args.output:
        args.output.write_text(rendered, encoding="utf-8")
        logger.info("Wrote %d studies to %s", len(report.studies), args.output)
    else:
        sys.stdout.write(rendered)

    return 0


if __name__ == "__main__":
    sys.exit(main())
