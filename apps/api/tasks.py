from celery import shared_task
import logging

from apps.redesign.engine import RedesignEngine
from apps.redesign.schemas import RedesignRequest, WorkflowContext
from .models import RedesignJob

logger = logging.getLogger(__name__)


def _live_jobs(job_id):
    # Updates only land while the job has not been superseded or finished
    return RedesignJob.objects.filter(id=job_id).exclude(status__in=RedesignJob.TERMINAL_STATUSES)


def job_context(job: RedesignJob) -> WorkflowContext:
    """Bind the engine's callbacks to the job row, discarding writes for stale jobs."""

    def notify(level, message):
        job.notifications.append({"level": level, "message": message})
        _live_jobs(job.id).update(notifications=job.notifications)

    def on_transition(state, attempt):
        if state in RedesignJob.TERMINAL_STATUSES:
            return
        _live_jobs(job.id).update(status=state, attempts=attempt)

    def is_superseded():
        return RedesignJob.objects.filter(id=job.id, status='SUPERSEDED').exists()

    return WorkflowContext(
        account=job.account,
        job_id=str(job.id),
        notify=notify,
        on_transition=on_transition,
        is_superseded=is_superseded,
    )


def request_from_job(job: RedesignJob) -> RedesignRequest:
    return RedesignRequest(
        source_image=bytes(job.source_image),
        mime_type=job.source_mime_type,
        styles=tuple(job.styles),
        allow_structural_changes=job.allow_structural_changes,
        climate_zone=job.climate_zone,
        lock_aspect_ratio=job.lock_aspect_ratio,
        density=job.density,
    )


@shared_task
def process_redesign_task(job_id):
    """
    Run the redesign workflow for one queued job.
    The outcome is written back only if the job is still live.
    """
    job = RedesignJob.objects.select_related('account').get(id=job_id)
    if job.is_terminal:
        logger.info(f"Job {job_id} already {job.status}, nothing to do")
        return job.status

    engine = RedesignEngine()
    try:
        outcome = engine.run(request_from_job(job), job_context(job))
    except Exception as e:
        logger.error(f"Task failed: {e!r}")
        _live_jobs(job_id).update(
            status='FAILED',
            error_kind='unclassified',
            error_message="Failed to generate redesign. Please try again.",
        )
        return 'FAILED'

    if outcome.state == 'SUPERSEDED':
        return outcome.state

    updated = _live_jobs(job_id).update(
        status=outcome.state,
        attempts=outcome.attempts,
        error_kind=outcome.error_kind,
        error_message=outcome.error_message,
        redesign=outcome.redesign,
    )
    if not updated:
        logger.info(f"Job {job_id} was superseded before its outcome landed; discarding")
    return outcome.state
