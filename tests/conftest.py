"""
Pytest configuration and shared fixtures.
"""

import asyncio
import base64
from collections.abc import Awaitable, Callable

import pytest

from lsp_queue.config import Settings
from lsp_queue.constants import Request
from lsp_queue.errors import ResourceLoadError
from lsp_queue.scheduler import CompletionTracker, JobScheduler
from lsp_queue.types.events import ErrorNotification
from lsp_queue.types.job import EnqueuedJob


class FakeWorker:
    """Worker whose readiness is set by the test."""

    def __init__(self, ready: bool = True):
        self.ready = ready

    def is_ready(self) -> bool:
        return self.ready


class FakeTransport:
    """Records sent jobs; the test answers them explicitly."""

    def __init__(self) -> None:
        self.sent: list[EnqueuedJob] = []
        self.answered: set[str] = set()
        self.tracker = CompletionTracker()

    def send(self, job: EnqueuedJob) -> None:
        self.sent.append(job)

    def completion(self, job_id: str) -> Awaitable[object]:
        return self.tracker.expect(job_id)

    def in_flight(self) -> int:
        return sum(1 for job in self.sent if job.id not in self.answered)

    def answer(self, job_id: str, result: object = None) -> None:
        self.answered.add(job_id)
        self.tracker.resolve(job_id, result)

    @property
    def requests(self) -> list[Request]:
        return [job.request for job in self.sent]


class FakeLoader:
    """In-memory resources keyed by URI."""

    def __init__(self) -> None:
        self.texts: dict[str, str] = {}
        self.binaries: dict[str, bytes] = {}
        self.calls: list[str] = []

    def read_text(self, uri: str) -> str:
        self.calls.append(uri)
        if uri not in self.texts:
            raise ResourceLoadError(uri, "No such file or directory")
        return self.texts[uri]

    def read_binary_as_base64(self, uri: str) -> str:
        self.calls.append(uri)
        if uri not in self.binaries:
            raise ResourceLoadError(uri, "No such file or directory")
        return base64.b64encode(self.binaries[uri]).decode("ascii")


class RecordingSink:
    """Error sink that keeps every notification."""

    def __init__(self) -> None:
        self.notifications: list[ErrorNotification] = []

    def __call__(self, notification: ErrorNotification) -> None:
        self.notifications.append(notification)


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        coalesce_delay_seconds=0.0,
        log_level="DEBUG",
        log_format="console",
    )


@pytest.fixture
def worker() -> FakeWorker:
    return FakeWorker(ready=True)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def loader() -> FakeLoader:
    loader = FakeLoader()
    loader.texts["file:///project/Main.flix"] = "def main(): Unit = ()"
    loader.texts["file:///project/Util.flix"] = "def util(): Int32 = 42"
    loader.binaries["file:///project/lib/json.fpkg"] = b"PK\x03\x04json"
    return loader


@pytest.fixture
def error_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def scheduler(
    worker: FakeWorker,
    transport: FakeTransport,
    loader: FakeLoader,
    error_sink: RecordingSink,
    test_settings: Settings,
) -> JobScheduler:
    """Create a scheduler wired to the fakes."""
    return JobScheduler(
        worker,
        transport,
        loader=loader,
        error_sink=error_sink,
        settings=test_settings,
    )


@pytest.fixture
def settle() -> Callable[..., Awaitable[None]]:
    """Let scheduled callbacks and the dispatch loop run."""

    async def _settle(ticks: int = 50) -> None:
        for _ in range(ticks):
            await asyncio.sleep(0)

    return _settle
