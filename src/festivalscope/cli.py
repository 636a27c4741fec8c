"""festivalscope CLI: browse or search festivals and print the filtered view."""

import argparse
import asyncio
import logging
import sys
import uuid
from datetime import date

import mlflow

from festivalscope.catalog.regions import AREA_CODES, SEASON_TOKENS
from festivalscope.config import settings
from festivalscope.core.types import ALL, BrowserStatus, FilterState, KeywordMode
from festivalscope.engine.pipeline import FestivalBrowser
from festivalscope.observability.logging import session_id, setup_logging
from festivalscope.retrieval.client import FestivalApiClient

logger = logging.getLogger(__name__)


def _init_mlflow() -> None:
    """Initialize MLflow tracking for the current process."""
    mlflow.set_tracking_uri(settings.mlflow_tracking_uri)
    mlflow.set_experiment(settings.mlflow_experiment_name)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="festivalscope",
        description="Browse Korean festivals with keyword, region, season and date filters.",
    )
    text = parser.add_mutually_exclusive_group()
    text.add_argument("-q", "--query", help="free-text search")
    text.add_argument("-k", "--keyword", action="append", dest="keywords", help="keyword (repeatable)")
    parser.add_argument(
        "--match", choices=[m.value for m in KeywordMode], default=KeywordMode.ANY.value,
        help="keyword match mode (default: ANY)",
    )
    parser.add_argument(
        "--region", default=ALL,
        help=f"area code or region name ({', '.join(f'{c}={n}' for c, n in AREA_CODES.items())})",
    )
    parser.add_argument("--season", default=ALL, choices=[ALL, *SEASON_TOKENS])
    parser.add_argument("--from", dest="date_from", type=_parse_date, help="range start YYYY-MM-DD")
    parser.add_argument("--to", dest="date_to", type=_parse_date, help="range end YYYY-MM-DD")
    parser.add_argument("--pages", type=int, default=1, help="number of pages to load (default: 1)")
    parser.add_argument("--no-details", action="store_true", help="skip per-festival detail fetches")
    return parser


def filter_state_from_args(args: argparse.Namespace) -> FilterState:
    state = FilterState(keyword_mode=KeywordMode(args.match))
    if args.keywords:
        state = state.with_keywords(args.keywords)
    elif args.query:
        state = state.with_query(args.query)
    return (
        state.with_region(args.region)
        .with_season(args.season)
        .with_date_range(args.date_from, args.date_to)
    )


async def run(args: argparse.Namespace) -> int:
    """Load pages for the requested filter, resolve details, print the view."""
    state = filter_state_from_args(args)
    token = session_id.set(uuid.uuid4().hex[:12])
    try:
        async with FestivalApiClient() as client:
            browser = FestivalBrowser(client)
            await browser.set_filter(state)
            if not browser.accumulator.pages_loaded and browser.status != BrowserStatus.ERROR:
                await browser.load_next_page()
            while (
                browser.has_more
                and browser.accumulator.pages_loaded < args.pages
                and browser.accumulator.error is None
            ):
                await browser.load_next_page()

            if browser.status == BrowserStatus.ERROR:
                print(f"Failed to load festivals: {browser.accumulator.error}")
                return 1

            if not args.no_details:
                browser.request_details(browser.unfiltered_view)
                await browser.details.wait_pending()

            _print_view(browser)
            return 0
    finally:
        session_id.reset(token)


def _print_view(browser: FestivalBrowser) -> None:
    view = browser.filtered_view
    loaded = len(browser.accumulator)
    print(f"\n{'=' * 60}")
    print(f"{len(view)} of {loaded} festivals match", end="")
    print(" (more available)" if browser.has_more else "")
    if browser.load_more_failed:
        print("Failed to load more results.")
    print(f"{'=' * 60}")

    if browser.status == BrowserStatus.NO_RESULTS:
        print("검색 결과가 없습니다. 다른 검색어/키워드를 시도해 보세요!")
        return

    today = date.today()
    for festival in view:
        ended = " [종료]" if festival.is_ended(today) else ""
        print(f"\n{festival.name}{ended}")
        print(f"  {festival.period}")
        print(f"  {festival.location}")
        if festival.venue:
            print(f"  @ {festival.venue}")
        if festival.description:
            print(f"  {festival.description[:120]}")


def main() -> None:
    """Run a festival browse: festivalscope [filters]"""
    setup_logging(json_format=settings.log_json, level=settings.log_level)
    _init_mlflow()

    args = build_parser().parse_args()
    if (args.date_from is None) != (args.date_to is None):
        logger.warning("Date range needs both --from and --to; ignoring it")
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
