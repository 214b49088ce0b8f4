import logging
from typing import Optional

from apps.nano_banana import client as nano_banana
from . import ledger
from .errors import (
    GENERIC_MESSAGE,
    VALIDATION_SUGGESTION,
    GenerationBlocked,
    QuotaExceeded,
    ValidationFailed,
    sanitize_error,
)
from .persistence import PersistenceGateway
from .prompt_builder import build_prompt
from .schemas import RedesignRequest, ValidationResult, WorkflowContext, WorkflowOutcome
from .validator import Validator

logger = logging.getLogger(__name__)

MAX_RETRIES = 2

GENERATING = "GENERATING"
VALIDATING = "VALIDATING"
RETRYING = "RETRYING"
SUCCESS = "SUCCESS"
FAILED = "FAILED"
QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
SUPERSEDED = "SUPERSEDED"


class RedesignEngine:
    """
    Runs one redesign request: ledger check, then up to MAX_RETRIES rounds of
    generate -> validate, then persistence of the first passing result.

    Every collaborator failure is caught here and turned into a classified
    WorkflowOutcome; `run` does not raise for external errors.
    """

    def __init__(self, generate=None, validator: Validator = None, gateway: PersistenceGateway = None,
                 max_retries: int = MAX_RETRIES):
        self.generate = generate or nano_banana.generate_redesign
        self.validator = validator or Validator()
        self.gateway = gateway or PersistenceGateway()
        self.max_retries = max_retries

    def run(self, request: RedesignRequest, context: WorkflowContext) -> WorkflowOutcome:
        account = context.account
        usage = ledger.check_limit(account)
        if usage.has_reached_limit:
            error = QuotaExceeded(usage.limit)
            logger.info(f"Account {account.pk} is at its limit ({usage.used}/{usage.limit})")
            return WorkflowOutcome(
                state=QUOTA_EXCEEDED,
                error_kind=error.kind,
                error_message=str(error),
                usage=usage,
            )

        prompt = build_prompt(
            request.styles,
            request.allow_structural_changes,
            request.climate_zone,
            request.lock_aspect_ratio,
            request.density,
        )

        last_error: Optional[Exception] = None
        validation: Optional[ValidationResult] = None

        for attempt in range(1, self.max_retries + 1):
            if context.is_superseded():
                return self._superseded(context, attempt - 1)

            if attempt > 1:
                context.on_transition(RETRYING, attempt)
                context.notify("info", f"Retrying redesign (attempt {attempt} of {self.max_retries})...")

            context.on_transition(GENERATING, attempt)
            try:
                generated = self.generate(request.source_image, request.mime_type, prompt)
            except Exception as e:
                logger.warning(f"Generation attempt {attempt} failed: {e!r}")
                last_error = e
                continue

            if context.is_superseded():
                return self._superseded(context, attempt)

            context.on_transition(VALIDATING, attempt)
            try:
                validation = self.validator.validate(
                    request.source_image,
                    request.mime_type,
                    generated.image_bytes,
                    generated.mime_type,
                    request,
                )
            except ValidationFailed as e:
                logger.warning(f"Validator response rejected on attempt {attempt}: {e}")
                last_error = e
                continue

            if not validation.overall_pass:
                last_error = ValidationFailed(validation.reasons)
                continue

            if context.is_superseded():
                return self._superseded(context, attempt)

            try:
                redesign = self.gateway.persist(request, generated, generated.catalog, account)
            except Exception as e:
                # Uploads carry their own backoff; a persistence failure ends the run
                logger.error(f"Persisting redesign failed for account {account.pk}: {e!r}")
                return self._failed(context, e, attempt, validation)

            if context.is_superseded():
                # Row and usage are already committed; the job keeps its SUPERSEDED status
                logger.warning(
                    f"Redesign job {context.job_id} was superseded during persistence; "
                    f"redesign {redesign.id} kept in history"
                )

            context.on_transition(SUCCESS, attempt)
            return WorkflowOutcome(
                state=SUCCESS,
                redesign=redesign,
                catalog=generated.catalog,
                attempts=attempt,
                validation=validation,
                usage=ledger.check_limit(account),
            )

        return self._failed(context, last_error, self.max_retries, validation)

    def _superseded(self, context, attempts):
        logger.info(f"Redesign job {context.job_id} superseded after {attempts} attempt(s)")
        return WorkflowOutcome(state=SUPERSEDED, attempts=attempts)

    def _failed(self, context, error, attempts, validation):
        kind, message = classify_failure(error)
        logger.error(f"Redesign job {context.job_id} failed ({kind}) after {attempts} attempt(s): {error!r}")
        context.on_transition(FAILED, attempts)
        return WorkflowOutcome(
            state=FAILED,
            attempts=attempts,
            error_kind=kind,
            error_message=message,
            validation=validation,
        )


def classify_failure(error):
    """Map the last error of a run to (kind, user-facing message)."""
    if isinstance(error, ValidationFailed):
        return ValidationFailed.kind, VALIDATION_SUGGESTION
    if isinstance(error, GenerationBlocked):
        return GenerationBlocked.kind, (
            f"Your photo or settings were blocked by the image provider ({error.reason}). "
            "Please try a different photo."
        )
    kind = getattr(error, "kind", "unclassified")
    message = sanitize_error(error)
    if message == GENERIC_MESSAGE:
        return kind, "Failed to generate redesign. Please try again."
    return kind, f"Failed to generate redesign. {message}."
