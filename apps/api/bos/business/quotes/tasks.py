from __future__ import annotations

import logging
import time
import uuid

from opentelemetry.trace import Status, StatusCode
from sqlalchemy.orm import Session

from bos.business.quotes.service import quote_service
from bos.context import get_correlation_id, reset_correlation_id, set_correlation_id
from bos.core.celery_app import celery_app
from bos.core.database import SessionLocal
from bos.metrics import observe_job
from bos.otel import get_tracer


logger = logging.getLogger("bos.jobs")
tracer = get_tracer("bos.jobs")

RECALCULATE_TOTALS_JOB = "QUOTE_RECALCULATE_TOTALS"


def run_recalculate_totals(
    session: Session,
    quote_id: uuid.UUID,
    *,
    job_id: str | None = None,
    correlation_id: str | None = None,
) -> bool:
    job_id = job_id or str(uuid.uuid4())
    correlation_id = correlation_id or get_correlation_id() or job_id
    token = set_correlation_id(correlation_id)
    started = time.perf_counter()
    final_status = "Failed"
    with tracer.start_as_current_span("bos.job.run") as job_span:
        job_span.set_attribute("job_id", job_id)
        job_span.set_attribute("job_type", RECALCULATE_TOTALS_JOB)
        job_span.set_attribute("quote_id", str(quote_id))
        job_span.set_attribute("correlation_id", correlation_id)

        logger.info(
            "job.started",
            extra={
                "job_id": job_id,
                "job_type": RECALCULATE_TOTALS_JOB,
                "status": "Running",
                "duration_ms": 0.0,
                "quote_id": str(quote_id),
            },
        )
        try:
            try:
                changed = quote_service.recalculate_quote_totals(session, quote_id)
            except Exception as exc:
                session.rollback()
                job_span.record_exception(exc)
                job_span.set_status(Status(StatusCode.ERROR, str(exc)))
                logger.info(
                    "job.finished",
                    extra={
                        "job_id": job_id,
                        "job_type": RECALCULATE_TOTALS_JOB,
                        "status": "Failed",
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                        "error": str(exc)[:500],
                        "quote_id": str(quote_id),
                    },
                )
                raise

            final_status = "Succeeded"
            logger.info(
                "job.finished",
                extra={
                    "job_id": job_id,
                    "job_type": RECALCULATE_TOTALS_JOB,
                    "status": final_status,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    "quote_id": str(quote_id),
                },
            )
            return changed
        finally:
            observe_job(job_type=RECALCULATE_TOTALS_JOB, status=final_status, duration=time.perf_counter() - started)
            reset_correlation_id(token)


@celery_app.task(bind=True, name="bos.quotes.recalculate_totals")
def recalculate_totals_task(self, quote_id: str, correlation_id: str | None = None) -> bool:  # type: ignore[no-untyped-def]
    with SessionLocal() as session:
        return run_recalculate_totals(
            session,
            uuid.UUID(quote_id),
            job_id=self.request.id,
            correlation_id=correlation_id,
        )
