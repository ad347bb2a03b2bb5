"""
Shared test fixtures.

These replace real infrastructure with lightweight in-memory alternatives:
- Job store → InMemoryJobStore (SQLite in memory for the SQL store tests)
- AI service → FakeTransformClient (canned responses, optional gates)
- HTTP server → httpx.AsyncClient with ASGI transport (no network)

FakeTransformClient keys its behavior on the raw image bytes it receives,
so every test image gets distinct bytes (b"image-<label>") and the order of
`calls` tells you the order jobs actually ran in.
"""

import threading
import time
from typing import Callable, Optional, Union

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from ai.base import AbstractTransformationClient
from api.dependencies import get_store, get_styles, get_task_queue
from api.main import create_app
from common.codec import encode_data_url
from common.styles import StyleCatalog
from scheduler.engine import TaskQueue
from store.memory import InMemoryJobStore
from worker.executor import TransformationWorker

STYLE = "Watercolor Art"
RESULT_URL = "data:image/png;base64,AAAA"

Outcome = Union[str, BaseException]


class FakeTransformClient(AbstractTransformationClient):
    """
    Stand-in for the AI service.

    - responses: image bytes → response text (or an exception to raise)
    - gates: image bytes → Event the call blocks on until set
    - on_call: hook run at the start of every call (e.g. sample queue status)
    """

    def __init__(self, default: Outcome = f"Here is your image: {RESULT_URL}", delay: float = 0.0):
        self.default = default
        self.delay = delay
        self.responses: dict[bytes, Outcome] = {}
        self.gates: dict[bytes, threading.Event] = {}
        self.on_call: Optional[Callable[[bytes], None]] = None
        self.calls: list[bytes] = []
        self.prompts: list[str] = []
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def transform(self, image_bytes: bytes, prompt: str) -> str:
        with self._lock:
            self.calls.append(image_bytes)
            self.prompts.append(prompt)
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            if self.on_call is not None:
                self.on_call(image_bytes)
            gate = self.gates.get(image_bytes)
            if gate is not None:
                gate.wait(timeout=5)
            if self.delay:
                time.sleep(self.delay)

            outcome = self.responses.get(image_bytes, self.default)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        finally:
            with self._lock:
                self.active -= 1

    def block(self, label: str) -> threading.Event:
        """Make calls for image `label` wait until the returned event is set."""
        gate = threading.Event()
        self.gates[image_bytes(label)] = gate
        return gate


def image_bytes(label: str) -> bytes:
    return f"image-{label}".encode()


def make_image(store, label: str, user_id: int = 1, style: str = STYLE):
    """Create a pending image whose original decodes to image_bytes(label)."""
    return store.create_image(user_id, encode_data_url(image_bytes(label)), style)


@pytest.fixture
def store():
    return InMemoryJobStore()


@pytest.fixture
def styles():
    return StyleCatalog()


@pytest.fixture
def fake_client():
    return FakeTransformClient()


@pytest.fixture
def worker(store, fake_client, styles):
    return TransformationWorker(store, fake_client, styles)


@pytest.fixture
def make_queue(worker):
    """Factory for task queues sharing the test worker; all are shut down afterwards."""
    queues: list[TaskQueue] = []

    def _make(max_concurrent: int = 1, queue_worker=None) -> TaskQueue:
        q = TaskQueue(queue_worker or worker, max_concurrent=max_concurrent)
        queues.append(q)
        return q

    yield _make

    for q in queues:
        q.wait_until_idle(timeout=5)
        q.shutdown(wait=False)


@pytest.fixture
def task_queue(make_queue):
    return make_queue(max_concurrent=2)


@pytest_asyncio.fixture
async def client(store, styles, task_queue):
    """
    Create a test HTTP client that talks directly to the FastAPI app.

    dependency_overrides tells FastAPI: "instead of the store/queue built in
    the lifespan, use these test versions". ASGITransport does not run the
    lifespan, so no real AI client is ever created.
    """
    app = create_app()

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_styles] = lambda: styles
    app.dependency_overrides[get_task_queue] = lambda: task_queue

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
