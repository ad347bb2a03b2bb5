"""
FastAPI dependency injection.

How this works:
- The lifespan in api/main.py builds ONE store, style catalog and task queue
  and stores them on app.state
- An endpoint declares `store: AbstractJobStore = Depends(get_store)`
- FastAPI calls get_store() before the endpoint runs and passes the result in

Tests swap any of these out with app.dependency_overrides, so no real AI
service or database needed.
"""

from fastapi import Request

from common.styles import StyleCatalog
from scheduler.engine import TaskQueue
from store.base import AbstractJobStore


def get_store(request: Request) -> AbstractJobStore:
    """Returns the job store created during startup."""
    return request.app.state.store


def get_styles(request: Request) -> StyleCatalog:
    return request.app.state.styles


def get_task_queue(request: Request) -> TaskQueue:
    """Returns the task queue created during startup."""
    return request.app.state.task_queue
