import asyncio
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from replyflow.config import settings
from replyflow.database import SessionLocal
from replyflow.logging_config import get_logger, setup_logging
from replyflow.routers import conversations, webhook
from replyflow.services.llm import get_llm_provider
from replyflow.services.reply_job_service import run_reply_jobs
from replyflow.services.whapi_service import WhapiGateway

setup_logging(settings.log_level)

app = FastAPI(
    title="Reply Flow API",
    description="Inbound message ingestion and automated replies for the Reply Flow inbox",
    version="0.1.0",
)

cors_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
if not cors_origins:
    cors_origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(webhook.router)
app.include_router(conversations.router)

worker_logger = get_logger("reply_worker")
_reply_worker_task: asyncio.Task | None = None


def _is_reply_worker_enabled() -> bool:
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return False
    return settings.reply_worker_enabled


def _run_reply_batch() -> dict:
    db = SessionLocal()
    try:
        return run_reply_jobs(
            db,
            provider=get_llm_provider(),
            gateway=WhapiGateway(settings.whapi_gate_url, settings.whapi_timeout_seconds),
            limit=settings.reply_worker_batch_size,
            max_attempts=settings.reply_job_max_attempts,
            backoff_seconds=settings.reply_job_backoff_seconds,
            stale_seconds=settings.reply_job_stale_seconds,
        )
    finally:
        db.close()


async def _reply_worker_loop() -> None:
    interval_seconds = max(settings.reply_worker_interval_seconds, 0.1)
    while True:
        try:
            await asyncio.sleep(interval_seconds)
            results = await asyncio.to_thread(_run_reply_batch)
            if results["claimed"]:
                worker_logger.info("Reply worker processed", extra={"context": results})
        except asyncio.CancelledError:
            break
        except Exception as exc:
            worker_logger.error(
                "Reply worker loop failed",
                extra={"context": {"error": str(exc)}},
            )


@app.on_event("startup")
async def start_reply_worker() -> None:
    global _reply_worker_task
    if not _is_reply_worker_enabled():
        return
    if get_llm_provider() is None:
        worker_logger.warning("ANTHROPIC_API_KEY not set, generated replies will be skipped")
    if _reply_worker_task is None or _reply_worker_task.done():
        _reply_worker_task = asyncio.create_task(_reply_worker_loop())
        worker_logger.info("Reply worker started")


@app.on_event("shutdown")
async def stop_reply_worker() -> None:
    global _reply_worker_task
    if _reply_worker_task is None:
        return
    _reply_worker_task.cancel()
    try:
        await _reply_worker_task
    except asyncio.CancelledError:
        pass
    _reply_worker_task = None


@app.get("/health")
async def health():
    return {"status": "ok"}
