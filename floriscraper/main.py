"""Command-line entry point: one scrape of the Explorer purchase listing."""

from __future__ import annotations

import argparse
import asyncio
import time
import uuid
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, AsyncContextManager, Callable, Iterable

from dotenv import load_dotenv

from floriscraper.config import Settings, load_config, load_settings
from floriscraper.errors import ConfigurationError, SinkError
from floriscraper.extractors import FieldExtractor
from floriscraper.filters import FilterController
from floriscraper.health import HealthMonitor
from floriscraper.logging_config import get_logger, set_level
from floriscraper.models import HEADER, RunStatus
from floriscraper.pagination import PaginationWalker, WalkResult
from floriscraper.reporter import finished_status, status_text
from floriscraper.session import open_session
from floriscraper.storage import DryRunSink, Sink
from floriscraper.storage.sheets import GoogleSheetsSink

LOGGER = get_logger(__name__)

DRY_RUN_RANGE = "dry-run"

SessionFactory = Callable[[Settings], AsyncContextManager[Any]]


@dataclass
class RunOutcome:
    ok: bool
    records: int
    status: RunStatus
    error: BaseException | None = None


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the scraper."""

    parser = argparse.ArgumentParser(
        description="Scrape the Floriday Explorer purchase listing into Google Sheets."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML run configuration (default: floriscraper/config.yml).",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Override the safety ceiling on pages walked in one run.",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window instead of running headless.",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Run the scrape but log the table instead of writing to the sheet.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL for this run (e.g. DEBUG).",
    )

    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.max_pages is not None and args.max_pages <= 0:
        parser.error("--max-pages must be a positive integer")
    return args


async def scrape_listing(
    session: Any,
    settings: Settings,
    *,
    monitor: HealthMonitor | None = None,
) -> WalkResult:
    """Sign in, filter the purchase view and walk every listing page."""

    await session.sign_in()
    await session.open_purchase_view()
    panel = await session.open_filter_panel()
    await FilterController(panel, session.settle).apply(settings.filters)
    await session.submit_search()

    walker = PaginationWalker(
        session.listing(),
        FieldExtractor(monitor=monitor),
        max_pages=settings.max_pages,
        monitor=monitor,
    )
    return await walker.walk()


async def run_once(
    settings: Settings,
    sink: Sink,
    *,
    session_factory: SessionFactory = open_session,
    monitor: HealthMonitor | None = None,
    timer: Callable[[], float] = time.monotonic,
) -> RunOutcome:
    """Run one scrape and publish the table plus exactly one final status.

    The table is only cleared and rewritten after the walk completes, so a
    failed run leaves no partial rows behind. The browser session is closed
    on every path by ``session_factory``'s context manager.
    """

    started = timer()
    target = settings.sheet.target_sheet if settings.sheet else DRY_RUN_RANGE

    def _elapsed_ms() -> float:
        return (timer() - started) * 1000

    try:
        sink.set_status(status_text(RunStatus.started()))
        LOGGER.info("Status set to in-progress")

        async with session_factory(settings) as session:
            result = await scrape_listing(session, settings, monitor=monitor)
        LOGGER.info("Total collected: %d products over %d pages", result.total, result.pages)

        sink.clear_range(target)
        sink.write_table(target, HEADER, result.records)

        status = finished_status(ok=True, elapsed_ms=_elapsed_ms())
        sink.set_status(status_text(status))
        LOGGER.info("Scraping completed | runtime=%s", status.elapsed)
        if monitor is not None:
            monitor.record_run_end(ok=True, total=result.total)
        return RunOutcome(ok=True, records=result.total, status=status)
    except Exception as exc:
        LOGGER.exception("Scraping failed: %s", exc)
        status = _report_failure(sink, _elapsed_ms(), monitor)
        return RunOutcome(ok=False, records=0, status=status, error=exc)
    except BaseException:
        # Ctrl-C or cancellation: the status cell must not stay "in progress".
        LOGGER.warning("Scraping interrupted; marking run as failed")
        _report_failure(sink, _elapsed_ms(), monitor)
        raise


def _report_failure(sink: Sink, elapsed_ms: float, monitor: HealthMonitor | None) -> RunStatus:
    status = finished_status(ok=False, elapsed_ms=elapsed_ms)
    try:
        sink.set_status(status_text(status))
    except Exception as update_exc:
        LOGGER.error("Failed to update failure status in sheet: %s", update_exc)
    if monitor is not None:
        monitor.record_run_end(ok=False, total=0)
    return status


def _build_sink(settings: Settings, *, validate: bool) -> Sink:
    if validate or settings.sheet is None:
        return DryRunSink()
    sheet = settings.sheet
    try:
        return GoogleSheetsSink.from_service_account(
            sheet.service_account_info,
            sheet.spreadsheet_id,
            status_cell=sheet.status_cell,
        )
    except Exception as exc:
        raise SinkError(f"Unable to open spreadsheet: {exc}") from exc


async def _async_main(argv: Iterable[str] | None = None) -> bool:
    args = parse_args(argv)
    if args.log_level:
        set_level(args.log_level)
    LOGGER.info(
        "Parsed arguments: config=%s max_pages=%s headed=%s validate=%s",
        args.config,
        args.max_pages,
        args.headed,
        args.validate,
    )

    load_dotenv()

    config = load_config(args.config)
    settings = load_settings(config, require_sheet=not args.validate)
    if args.max_pages is not None:
        settings = settings.model_copy(update={"max_pages": args.max_pages})

    sink = _build_sink(settings, validate=args.validate)
    monitor = HealthMonitor(run_id=uuid.uuid4().hex[:12], log_path=Path(settings.health_log))
    factory = partial(open_session, headless=False) if args.headed else open_session

    outcome = await run_once(settings, sink, session_factory=factory, monitor=monitor)
    LOGGER.info(
        "Run finished | ok=%s records=%d health=%s",
        outcome.ok,
        outcome.records,
        monitor.state.value,
    )
    return outcome.ok


def main(argv: Iterable[str] | None = None) -> None:
    try:
        ok = asyncio.run(_async_main(argv))
    except ConfigurationError as exc:
        LOGGER.error("Configuration error: %s", exc)
        raise SystemExit(1) from exc
    except SinkError as exc:
        LOGGER.error("Sink unavailable: %s", exc)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:  # pragma: no cover - interactive safety
        LOGGER.info("Interrupted by user")
        raise SystemExit(130)
    if not ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
