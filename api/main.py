"""
FastAPI application factory.

This file:
1. Creates the FastAPI app
2. Runs startup logic (job store, style catalog, AI client, worker, task queue)
3. Registers all routers (health, images, queue)
4. Runs shutdown logic (stop the queue, close the AI client)

The queue lives in THIS process: there is no separate worker process and no
durable queue. Restarting the API loses pending jobs, and their images stay in
`pending`/`processing`.

To run:  uvicorn api.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ai.openai_compatible import OpenAICompatibleClient
from api.routers import health, images, queue
from common.styles import StyleCatalog
from config.settings import settings
from scheduler.engine import TaskQueue
from store.registry import create_store
from worker.executor import TransformationWorker

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Runs on startup (before yield) and shutdown (after yield).

    Startup:
    - Builds the job store selected by STORE_BACKEND
    - Builds the AI client, the worker and the task queue (MAX_CONCURRENT slots)

    Shutdown:
    - Stops the queue without waiting for pending jobs
    - Closes the AI client's connection pool
    """
    # ── Startup ─────────────────────────────────────────────────
    store = create_store(settings)
    catalog = StyleCatalog()
    client = OpenAICompatibleClient.from_settings(settings)
    worker = TransformationWorker(store, client, catalog)

    app.state.store = store
    app.state.styles = catalog
    app.state.task_queue = TaskQueue(worker, max_concurrent=settings.MAX_CONCURRENT)
    logger.info(
        f"API ready, store: {settings.STORE_BACKEND}, "
        f"max concurrent: {settings.MAX_CONCURRENT}, model: {settings.AI_MODEL}"
    )

    yield  # app is running and serving requests between startup and shutdown

    # ── Shutdown ────────────────────────────────────────────────
    app.state.task_queue.shutdown(wait=False)
    client.close()
    logger.info("API shut down")


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    app = FastAPI(
        title="StyleShift",
        description="Batch AI image style transformation with a bounded-concurrency job queue",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Register routers, each one adds its endpoints to the app
    app.include_router(health.router)
    app.include_router(images.router)
    app.include_router(queue.router)

    return app


# This is what uvicorn imports: `uvicorn api.main:app`
app = create_app()


def run() -> None:
    """Console entry point: `styleshift-api`."""
    import uvicorn

    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)
