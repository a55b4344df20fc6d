from __future__ import annotations
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import auth, events, health, queue, runs, scores
from app.api.errors import recompute_error_handler
from app.core.config import settings
from app.core.logging import configure_logging
from app.db.init_db import init_db
from app.services.errors import RecomputeError
from app.services.recompute_worker import RecomputationWorker
from app.services.signals import WebhookSignalSink

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RecomputeError, recompute_error_handler)

app.state.worker = RecomputationWorker(listeners=[WebhookSignalSink(settings.signal_webhook_url)])


@app.on_event("startup")
def on_startup():
    configure_logging(settings.log_level)
    init_db()
    if settings.queue_autostart:
        app.state.worker.start_queue_processor(settings.queue_interval_seconds)


@app.on_event("shutdown")
def on_shutdown():
    app.state.worker.stop_queue_processor(timeout=10)


app.include_router(health.router)
app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(queue.router, prefix=settings.api_prefix)
app.include_router(events.router, prefix=settings.api_prefix)
app.include_router(scores.router, prefix=settings.api_prefix)
app.include_router(runs.router, prefix=settings.api_prefix)
