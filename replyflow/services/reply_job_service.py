from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from replyflow.logging_config import LoggerAdapter, get_logger
from replyflow.models import ReplyJob
from replyflow.services.alert_service import alert_error, alert_warning
from replyflow.services.clock import utcnow
from replyflow.services.eligibility_service import OutsideHours, Respond, resolve_eligibility
from replyflow.services.reply_service import respond_with_generated_reply, respond_with_outside_hours_message
from replyflow.services.result import Result

logger = get_logger("reply_jobs")

STATUS_PENDING = "PENDING"
STATUS_PROCESSING = "PROCESSING"
STATUS_DONE = "DONE"
STATUS_SKIPPED = "SKIPPED"
STATUS_FAILED = "FAILED"

OUTCOME_SENT = "sent"
OUTCOME_OUTSIDE_HOURS_SENT = "outside_hours_sent"
OUTCOME_NOT_SENT = "not_sent"
OUTCOME_COMPLETION_UNAVAILABLE = "skipped:completion_unavailable"


def enqueue_reply_job(db: Session, *, company_id: UUID, session_id: UUID, message_id: UUID) -> ReplyJob:
    job = ReplyJob(
        company_id=company_id,
        session_id=session_id,
        inbound_message_id=message_id,
        status=STATUS_PENDING,
        attempts=0,
    )
    db.add(job)
    db.flush()
    return job


def claim_pending_reply_jobs(db: Session, *, limit: int = 10, now: Optional[datetime] = None) -> list[ReplyJob]:
    """Move due PENDING jobs to PROCESSING and count the attempt.

    Rows are locked with SKIP LOCKED so concurrent workers never claim
    the same job.
    """
    now = now or utcnow()
    jobs = (
        db.query(ReplyJob)
        .filter(
            ReplyJob.status == STATUS_PENDING,
            or_(ReplyJob.next_attempt_at.is_(None), ReplyJob.next_attempt_at <= now),
        )
        .order_by(ReplyJob.created_at)
        .limit(limit)
        .with_for_update(skip_locked=True)
        .all()
    )
    for job in jobs:
        job.status = STATUS_PROCESSING
        job.attempts = (job.attempts or 0) + 1
        job.updated_at = now
    db.commit()
    return jobs


def mark_reply_job(
    db: Session,
    job: ReplyJob,
    *,
    status: str,
    outcome: Optional[str] = None,
    last_error: Optional[str] = None,
    next_attempt_at: Optional[datetime] = None,
) -> None:
    job.status = status
    job.outcome = outcome
    job.last_error = last_error
    job.next_attempt_at = next_attempt_at
    job.updated_at = utcnow()
    db.commit()


def retry_delay(attempts: int, backoff_seconds: float) -> timedelta:
    return timedelta(seconds=backoff_seconds * (2 ** max(attempts - 1, 0)))


def release_stale_reply_jobs(
    db: Session,
    *,
    stale_seconds: int,
    max_attempts: int,
    backoff_seconds: float,
    now: Optional[datetime] = None,
) -> dict:
    """Recover jobs left in PROCESSING by a worker that died mid-job.

    Rows untouched for ``stale_seconds`` go back to PENDING, or to FAILED
    once their attempts are used up.
    """
    now = now or utcnow()
    cutoff = now - timedelta(seconds=max(stale_seconds, 0))
    jobs = (
        db.query(ReplyJob)
        .filter(ReplyJob.status == STATUS_PROCESSING, ReplyJob.updated_at < cutoff)
        .with_for_update(skip_locked=True)
        .all()
    )
    released = failed = 0
    for job in jobs:
        job.last_error = "stale_processing"
        job.updated_at = now
        if (job.attempts or 0) >= max_attempts:
            job.status = STATUS_FAILED
            job.next_attempt_at = None
            failed += 1
        else:
            job.status = STATUS_PENDING
            job.next_attempt_at = now + retry_delay(job.attempts or 0, backoff_seconds)
            released += 1
    db.commit()

    context = {"released": released, "failed": failed, "stale_seconds": stale_seconds}
    if failed:
        alert_error("Automated replies abandoned after worker interruption", context)
    elif released:
        alert_warning("Automated replies released after worker interruption", context)
    if jobs:
        logger.warning("Released stale reply jobs", extra={"context": context})
    return {"released": released, "failed": failed}


def process_reply_job(db: Session, job: ReplyJob, *, provider, gateway, now: Optional[datetime] = None) -> Result[str]:
    """Run eligibility and dispatch for one job. The value is the outcome string."""
    try:
        decision = resolve_eligibility(db, job.company_id, job.session_id, now=now)

        if isinstance(decision, OutsideHours):
            message = respond_with_outside_hours_message(
                db, job.company_id, decision.session_id, decision.channel_id, decision.message, gateway
            )
            outcome = OUTCOME_OUTSIDE_HOURS_SENT if message else OUTCOME_NOT_SENT
        elif isinstance(decision, Respond):
            if provider is None:
                outcome = OUTCOME_COMPLETION_UNAVAILABLE
            else:
                message = respond_with_generated_reply(db, job.company_id, decision.context, provider, gateway)
                outcome = OUTCOME_SENT if message else OUTCOME_NOT_SENT
        else:
            outcome = f"skipped:{decision.reason}"

        db.flush()
        return Result.success(outcome)
    except Exception as exc:
        db.rollback()
        return Result.from_exception(exc, code="reply_failed")


def run_reply_jobs(
    db: Session,
    *,
    provider,
    gateway,
    limit: int = 10,
    max_attempts: int = 3,
    backoff_seconds: float = 5.0,
    stale_seconds: int = 300,
    now: Optional[datetime] = None,
) -> dict:
    """Claim and process one batch of reply jobs; each job commits on its own."""
    released = release_stale_reply_jobs(
        db,
        stale_seconds=stale_seconds,
        max_attempts=max_attempts,
        backoff_seconds=backoff_seconds,
        now=now,
    )
    jobs = claim_pending_reply_jobs(db, limit=limit, now=now)
    summary = {"claimed": len(jobs), "done": 0, "skipped": 0, "retried": 0, "failed": 0}
    if released["released"] or released["failed"]:
        summary["released_stale"] = released["released"]
        summary["failed_stale"] = released["failed"]

    for job in jobs:
        job_logger = LoggerAdapter(logger, {"job_id": str(job.id), "session_id": str(job.session_id)})
        result = process_reply_job(db, job, provider=provider, gateway=gateway, now=now)

        if result.ok:
            status = STATUS_SKIPPED if result.value.startswith("skipped:") else STATUS_DONE
            mark_reply_job(db, job, status=status, outcome=result.value)
            summary["skipped" if status == STATUS_SKIPPED else "done"] += 1
            job_logger.info("Reply job finished", context={"outcome": result.value})
            continue

        if job.attempts >= max_attempts:
            mark_reply_job(db, job, status=STATUS_FAILED, last_error=result.error)
            summary["failed"] += 1
            job_logger.error(
                "Reply job failed",
                context={"attempts": job.attempts, "error": result.error, "error_code": result.error_code},
            )
            alert_error(
                "Automated reply failed",
                {"job_id": str(job.id), "session_id": str(job.session_id), "error": result.error},
            )
            continue

        next_attempt_at = (now or utcnow()) + retry_delay(job.attempts, backoff_seconds)
        mark_reply_job(db, job, status=STATUS_PENDING, last_error=result.error, next_attempt_at=next_attempt_at)
        summary["retried"] += 1
        job_logger.warning(
            "Reply job will be retried",
            context={
                "attempts": job.attempts,
                "next_attempt_at": next_attempt_at.isoformat(),
                "error": result.error,
                "error_code": result.error_code,
            },
        )

    return summary
