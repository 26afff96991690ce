"""In-memory stand-ins for the browser-facing protocols used in tests."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from floriscraper.errors import GridTimeoutError
from floriscraper.pagination import NextControl
from floriscraper.playwright_env import SettlePolicy

NO_SETTLE = SettlePolicy().scaled(0)


class FakeSurface:
    """Canned per-field reads; names in ``broken`` raise instead of returning."""

    def __init__(
        self,
        *,
        details: str | None = "Rose\nAvalanche\nRO-123",
        price: str | None = "€0.37",
        packing: str | None = "577 - 80 per layer",
        quantity: str | None = "×33×80",
        image: str | None = "https://img.example/rose.jpg",
        farm_alt: str | None = "Farm Alpha",
        farm_text: str | None = "Farm Alpha BV",
        characteristics: list[str] | None = None,
        helper_select: str | None = None,
        helper_stack: tuple[str, str | None] | None = None,
        broken: set[str] | None = None,
    ) -> None:
        self.values = {
            "detail_text": details,
            "price_text": price,
            "packing_text": packing,
            "quantity_text": quantity,
            "image_src": image,
            "farm_image_alt": farm_alt,
            "farm_text": farm_text,
            "characteristic_values": characteristics if characteristics is not None else ["60 cm", "Red"],
            "helper_select_text": helper_select,
            "helper_stack": helper_stack,
        }
        self.broken = broken or set()
        self.calls: list[str] = []

    async def _get(self, name: str) -> Any:
        self.calls.append(name)
        if name in self.broken:
            raise RuntimeError(f"{name} selector not found")
        return self.values[name]

    async def detail_text(self):
        return await self._get("detail_text")

    async def price_text(self):
        return await self._get("price_text")

    async def packing_text(self):
        return await self._get("packing_text")

    async def quantity_text(self):
        return await self._get("quantity_text")

    async def image_src(self):
        return await self._get("image_src")

    async def farm_image_alt(self):
        return await self._get("farm_image_alt")

    async def farm_text(self):
        return await self._get("farm_text")

    async def characteristic_values(self):
        return await self._get("characteristic_values")

    async def helper_select_text(self):
        return await self._get("helper_select_text")

    async def helper_stack(self):
        return await self._get("helper_stack")


class FakeOption:
    def __init__(self, label: str | None, checked: bool = False) -> None:
        self._label = label
        self.checked = checked
        self.toggles = 0

    async def label(self):
        return self._label

    async def is_checked(self):
        return self.checked

    async def toggle(self):
        self.toggles += 1
        self.checked = not self.checked


class FakeGroup:
    def __init__(self, options: list[FakeOption], *, collapsed: bool = False, toggles: dict | None = None) -> None:
        self._options = options
        self.collapsed = collapsed
        self.expansions = 0
        self.toggles = toggles or {}
        self.lookups: list[tuple[str, str]] = []

    async def is_collapsed(self):
        return self.collapsed

    async def expand(self):
        self.expansions += 1
        self.collapsed = False

    async def options(self):
        return list(self._options)

    async def find_toggle(self, label, control):
        self.lookups.append((label, control))
        return self.toggles.get(label)


class FakePanel:
    def __init__(self, groups: dict[str, FakeGroup], toggles: dict[str, FakeOption] | None = None) -> None:
        self.groups = groups
        self.toggles = toggles or {}
        self.lookups: list[tuple[str, str]] = []

    async def find_group(self, label):
        return self.groups.get(label)

    async def find_toggle(self, label, control):
        self.lookups.append((label, control))
        return self.toggles.get(label)


class FakeListing:
    """A fixed sequence of pages; ``last_control`` is what the final page reports."""

    def __init__(
        self,
        pages: list[list[FakeSurface]],
        *,
        last_control: NextControl = NextControl.DISABLED,
        grid_fails_on: int | None = None,
    ) -> None:
        self.pages = pages
        self.last_control = last_control
        self.grid_fails_on = grid_fails_on
        self.index = 0
        self.visited: list[int] = []
        self.advances = 0

    async def wait_for_grid(self, page_number):
        if self.grid_fails_on == page_number:
            raise GridTimeoutError(page=page_number)

    async def items(self):
        self.visited.append(self.index + 1)
        return self.pages[self.index]

    async def next_control(self):
        if self.index >= len(self.pages) - 1:
            return self.last_control
        return NextControl.ENABLED

    async def advance(self):
        self.advances += 1
        self.index += 1


def make_pages(*counts: int) -> list[list[FakeSurface]]:
    return [
        [FakeSurface(details=f"Item {page}-{n}\nVariety\nCODE{n}") for n in range(count)]
        for page, count in enumerate(counts, start=1)
    ]


class FakeSession:
    def __init__(self, listing: FakeListing, panel: FakePanel | None = None) -> None:
        self._listing = listing
        self.panel = panel or FakePanel({})
        self.settle = NO_SETTLE
        self.steps: list[str] = []

    async def sign_in(self):
        self.steps.append("sign_in")

    async def open_purchase_view(self):
        self.steps.append("open_purchase_view")

    async def open_filter_panel(self):
        self.steps.append("open_filter_panel")
        return self.panel

    async def submit_search(self):
        self.steps.append("submit_search")

    def listing(self):
        return self._listing


class SessionFactory:
    """Counts how often the session is acquired and released."""

    def __init__(self, session: FakeSession | None = None, *, fail_on_enter: BaseException | None = None) -> None:
        self.session = session
        self.fail_on_enter = fail_on_enter
        self.opened = 0
        self.closed = 0

    def __call__(self, settings):
        @asynccontextmanager
        async def _scope():
            self.opened += 1
            try:
                if self.fail_on_enter is not None:
                    raise self.fail_on_enter
                yield self.session
            finally:
                self.closed += 1

        return _scope()


class RecordingSink:
    def __init__(self, *, fail_status_on: set[int] | None = None) -> None:
        self.statuses: list[str] = []
        self.cleared: list[str] = []
        self.tables: list[tuple[str, list[str], list]] = []
        self.fail_status_on = fail_status_on or set()

    def set_status(self, text):
        call = len(self.statuses) + 1
        self.statuses.append(text)
        if call in self.fail_status_on:
            raise RuntimeError("sheets quota exceeded")

    def clear_range(self, range_id):
        self.cleared.append(range_id)

    def write_table(self, range_id, header, records):
        self.tables.append((range_id, list(header), list(records)))
