"""
Glassdoor crawler entry point.

Reads the run input from an INPUT.json file and/or command-line flags,
runs the crawl and appends records to the dataset file.
"""
import os
import sys
import json
import asyncio
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from dotenv import load_dotenv
from pydantic import ValidationError

import metrics
from core.errors import CrawlError, InvalidInput, NoResultsFound
from core.settings import CrawlSettings
from crawler.models import CrawlInput
from crawler.orchestrator import GlassdoorCrawler

load_dotenv()

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Crawl Glassdoor job listings')
    parser.add_argument('--input', type=str, help='INPUT.json file with query/location/category/maxResults')
    parser.add_argument('--query', type=str, help='Search keywords')
    parser.add_argument('--location', type=str, help='Location text, e.g. "Austin"')
    parser.add_argument('--location-state', type=str, help='Region hint, e.g. "TX"')
    parser.add_argument('--category', type=str, help='"Companies" or "Jobs" (default)')
    parser.add_argument('--max-results', type=str, help='Maximum results; <=0 reads the count from page 1')
    parser.add_argument('--output', type=str, help='Dataset file (JSON lines)')
    return parser


def load_input(args: argparse.Namespace) -> CrawlInput:
    """
    Merge the INPUT.json file with command-line overrides.

    Raises:
        InvalidInput: unreadable file or invalid values
    """
    data: Dict[str, Any] = {}
    if args.input:
        try:
            data = json.loads(Path(args.input).read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidInput(f"Could not read input file {args.input}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidInput(f"Input file {args.input} must contain a JSON object")

    overrides = {
        'query': args.query,
        'location': args.location,
        'locationState': args.location_state,
        'category': args.category,
        'maxResults': args.max_results,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return CrawlInput.model_validate(data)
    except ValidationError as e:
        raise InvalidInput(f"Invalid input: {e}") from e


async def run(crawl_input: CrawlInput, settings: CrawlSettings) -> int:
    crawler = GlassdoorCrawler(settings)
    try:
        summary = await crawler.run(crawl_input)
    except NoResultsFound as e:
        logger.info(f"[main] {e}")
        return 0
    except (CrawlError, httpx.HTTPError) as e:
        logger.error(f"[main] Crawl failed: {e}")
        return 1

    logger.info(
        f"[main] Done: {summary.saved} saved, {summary.skipped} skipped, "
        f"{summary.failed} failed ({summary.unique} unique of {summary.listings} listings)"
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    args = build_parser().parse_args(argv)

    try:
        crawl_input = load_input(args)
    except InvalidInput as e:
        logger.error(f"[main] {e}")
        return 2

    settings = CrawlSettings(output_path=args.output)
    metrics.start_metrics_server(settings.metrics_port)
    return asyncio.run(run(crawl_input, settings))


if __name__ == '__main__':
    sys.exit(main())
