"""Pytest fixtures for website finder tests."""

import tempfile
import shutil
from pathlib import Path
from typing import Callable, Dict, Generator, Iterable, List, Optional, Sequence
from urllib.parse import parse_qs, urlparse

import pytest
from openpyxl import Workbook

from website_finder.core.exceptions import NavigationError, SelectorTimeout
from website_finder.crawler.config import SearchConfig
from website_finder.crawler.resolver import LinkResolver
from website_finder.models.search_result import LinkCandidate
from website_finder.pipeline.engine import JobEngine
from website_finder.services.job_control import JobControlService
from website_finder.services.job_registry import JobRegistry


class FakeSession:
    """
    Scripted stand-in for a browser session.

    Result links are looked up by the ``q`` parameter of the last navigated
    search URL, so tests script responses per sanitized query.
    """

    def __init__(
        self,
        links_by_query: Optional[Dict[str, List[str]]] = None,
        failing_queries: Iterable[str] = (),
        selector_timeout: bool = False,
        extract_error: Optional[Exception] = None,
        on_navigate: Optional[Callable[[str], None]] = None,
        enter_error: Optional[Exception] = None,
    ):
        self.links_by_query = links_by_query or {}
        self.failing_queries = set(failing_queries)
        self.selector_timeout = selector_timeout
        self.extract_error = extract_error
        self.on_navigate = on_navigate
        self.enter_error = enter_error
        self.navigated: List[str] = []
        self.queries: List[str] = []
        self.current_query: Optional[str] = None
        self.entered = 0
        self.closed = 0

    async def __aenter__(self):
        if self.enter_error is not None:
            raise self.enter_error
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed += 1

    async def navigate(self, url: str, wait_until: str = "domcontentloaded", timeout_ms: int = 20000) -> None:
        query = parse_qs(urlparse(url).query).get("q", [""])[0]
        self.navigated.append(url)
        self.queries.append(query)
        if self.on_navigate is not None:
            self.on_navigate(query)
        if query in self.failing_queries:
            raise NavigationError(url, f"timeout after {timeout_ms}ms")
        self.current_query = query

    async def wait_for_any_of(self, selectors: Sequence[str], timeout_ms: int = 10000) -> None:
        if self.selector_timeout:
            raise SelectorTimeout(selectors, timeout_ms)

    async def extract_links(self, selectors: Sequence[str]) -> List[LinkCandidate]:
        if self.extract_error is not None:
            raise self.extract_error
        hrefs = self.links_by_query.get(self.current_query, [])
        return [LinkCandidate(text="", href=href) for href in hrefs]


class FakeFetcher:
    """Hands out the same scripted session every time."""

    def __init__(self, session: FakeSession):
        self.session = session
        self.acquired = 0

    def acquire_session(self) -> FakeSession:
        self.acquired += 1
        return self.session


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: float = 1000.0, step: float = 1.0):
        self.now = start
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture(scope="function")
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp(prefix="website_finder_test_"))
    yield temp_path
    if temp_path.exists():
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(scope="function")
def make_workbook(temp_dir: Path) -> Callable[..., Path]:
    """Factory writing a single-sheet workbook into the temp dir."""

    def _make(header: Sequence, rows: Iterable[Sequence], name: str = "companies.xlsx") -> Path:
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(list(header))
        for row in rows:
            sheet.append(list(row))
        path = temp_dir / name
        workbook.save(path)
        return path

    return _make


@pytest.fixture(scope="function")
def search_config() -> SearchConfig:
    """Search config built from application settings."""
    return SearchConfig.from_settings()


@pytest.fixture(scope="function")
def resolver(search_config: SearchConfig) -> LinkResolver:
    return LinkResolver(search_config)


@pytest.fixture(scope="function")
def build_control(temp_dir: Path, resolver: LinkResolver) -> Callable[..., JobControlService]:
    """Factory for a job control service driving a fake browser session."""

    def _build(session: FakeSession, **engine_kwargs) -> JobControlService:
        clock = engine_kwargs.pop("clock", StepClock())
        engine = JobEngine(
            fetcher=FakeFetcher(session),
            resolver=resolver,
            results_dir=str(temp_dir / "results"),
            inter_item_delay_ms=engine_kwargs.pop("inter_item_delay_ms", 0),
            clock=clock,
            **engine_kwargs,
        )
        return JobControlService(registry=JobRegistry(clock=clock), engine=engine)

    return _build
