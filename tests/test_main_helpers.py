import asyncio
import re

import pytest

from floriscraper.config import Settings, SheetTarget
from floriscraper.errors import GridTimeoutError, PageLoadError
from floriscraper.main import parse_args, run_once
from floriscraper.models import HEADER, FilterSpec
from floriscraper.reporter import IN_PROGRESS_TEXT

from tests.fakes import (
    FakeGroup,
    FakeListing,
    FakeOption,
    FakePanel,
    FakeSession,
    RecordingSink,
    SessionFactory,
    make_pages,
)

SUCCESS_STATUS = re.compile(r"^✅ \d{2}/\d{2}/\d{4} \d{2}:\d{2}:\d{2} — (\d+m )?\d+s$")
FAILURE_STATUS = re.compile(r"^❌ Failed at \d{2}/\d{2}/\d{4} \d{2}:\d{2}:\d{2} — runtime \( (\d+m )?\d+s \)$")


def _settings(**overrides) -> Settings:
    values = dict(
        email="buyer@example.com",
        password="secret",
        sheet=SheetTarget(
            service_account_info={"type": "service_account"},
            spreadsheet_id="sheet-1",
            target_sheet="Products",
        ),
    )
    values.update(overrides)
    return Settings(**values)


def _run(settings, sink, factory):
    return asyncio.run(run_once(settings, sink, session_factory=factory))


def test_parse_args_defaults_and_flags() -> None:
    args = parse_args([])
    assert args.validate is False
    assert args.max_pages is None

    args = parse_args(["--validate", "--max-pages", "5", "--headed"])
    assert (args.validate, args.max_pages, args.headed) == (True, 5, True)


def test_parse_args_rejects_non_positive_max_pages() -> None:
    with pytest.raises(SystemExit):
        parse_args(["--max-pages", "0"])


def test_end_to_end_three_pages() -> None:
    session = FakeSession(FakeListing(make_pages(96, 96, 12)))
    factory = SessionFactory(session)
    sink = RecordingSink()

    outcome = _run(_settings(), sink, factory)

    assert outcome.ok is True
    assert outcome.records == 204
    assert sink.cleared == ["Products"]
    assert len(sink.tables) == 1
    range_id, header, records = sink.tables[0]
    assert range_id == "Products"
    assert header == list(HEADER)
    assert len(records) == 204
    assert all(len(record.as_row()) == 11 for record in records)
    assert sink.statuses[0] == IN_PROGRESS_TEXT
    assert len(sink.statuses) == 2
    assert SUCCESS_STATUS.match(sink.statuses[-1])
    assert (factory.opened, factory.closed) == (1, 1)
    assert session.steps == ["sign_in", "open_purchase_view", "open_filter_panel", "submit_search"]


def test_failure_after_first_page_writes_no_rows() -> None:
    listing = FakeListing(make_pages(55, 20), grid_fails_on=2)
    factory = SessionFactory(FakeSession(listing))
    sink = RecordingSink()

    outcome = _run(_settings(), sink, factory)

    assert outcome.ok is False
    assert isinstance(outcome.error, GridTimeoutError)
    assert listing.visited == [1]
    assert sink.tables == []
    assert sink.cleared == []
    assert len(sink.statuses) == 2
    assert FAILURE_STATUS.match(sink.statuses[-1])
    assert (factory.opened, factory.closed) == (1, 1)


def test_failure_status_write_error_is_swallowed() -> None:
    factory = SessionFactory(fail_on_enter=PageLoadError(url="https://idm.floriday.io/"))
    sink = RecordingSink(fail_status_on={2})

    outcome = _run(_settings(), sink, factory)

    assert outcome.ok is False
    assert isinstance(outcome.error, PageLoadError)
    assert len(sink.statuses) == 2
    assert factory.closed == 1


def test_filters_from_settings_are_applied() -> None:
    cut_flowers = FakeOption("Cut flowers")
    panel = FakePanel({"Trade item": FakeGroup([cut_flowers])})
    session = FakeSession(FakeListing(make_pages(1)), panel)
    settings = _settings(filters=[FilterSpec(group="Trade item", options={"Cut flowers": True})])

    outcome = _run(settings, RecordingSink(), SessionFactory(session))

    assert outcome.ok is True
    assert cut_flowers.checked is True


def test_dry_run_settings_without_sheet_use_placeholder_range() -> None:
    sink = RecordingSink()

    outcome = _run(_settings(sheet=None), sink, SessionFactory(FakeSession(FakeListing(make_pages(2)))))

    assert outcome.ok is True
    assert sink.tables[0][0] == "dry-run"


def test_cancelled_run_still_marks_failure() -> None:
    factory = SessionFactory(fail_on_enter=asyncio.CancelledError())
    sink = RecordingSink()

    with pytest.raises(asyncio.CancelledError):
        _run(_settings(), sink, factory)

    assert sink.statuses[0] == IN_PROGRESS_TEXT
    assert len(sink.statuses) == 2
    assert FAILURE_STATUS.match(sink.statuses[-1])
    assert sink.tables == []
    assert factory.closed == 1
