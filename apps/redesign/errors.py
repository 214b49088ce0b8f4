import re


class RedesignError(Exception):
    """Base class for every failure the redesign workflow classifies."""
    kind = "unclassified"


class InvalidRequest(RedesignError):
    kind = "invalid_request"


class QuotaExceeded(RedesignError):
    kind = "quota_exceeded"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"You have reached your limit of {limit} redesigns for this period."
        )


class GenerationError(RedesignError):
    kind = "generation_failed"


class GenerationBlocked(GenerationError):
    kind = "generation_blocked"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Request was blocked by the provider: {reason}")


class GenerationEmpty(GenerationError):
    kind = "generation_empty"


class ValidationFailed(RedesignError):
    kind = "validation_failed"

    def __init__(self, reasons=None):
        self.reasons = list(reasons or [])
        detail = "; ".join(self.reasons) or "criteria not met"
        super().__init__(f"Validation failed: {detail}")


class ValidatorUnavailable(RedesignError):
    kind = "validator_unavailable"


class ValidatorSchemaError(ValidationFailed):
    kind = "validation_failed"


class UploadFailed(RedesignError):
    kind = "upload_failed"


GENERIC_MESSAGE = "An unexpected error occurred"

VALIDATION_SUGGESTION = (
    "We couldn't produce a redesign that met our quality checks. "
    "Try selecting a single style or a less restrictive combination."
)


def sanitize_error(error) -> str:
    """Map an exception or message to a user-safe string without internal details."""
    if error is None:
        return GENERIC_MESSAGE
    message = error if isinstance(error, str) else str(getattr(error, "message", "") or error)
    lowered = message.lower()

    if "api key" in lowered or "api_key" in lowered:
        return "Service temporarily unavailable"
    if "network" in lowered or "fetch" in lowered:
        return "Network error occurred"
    if "timeout" in lowered or "timed out" in lowered or "deadline" in lowered:
        return "Request timed out"
    return GENERIC_MESSAGE


def sanitize_block_reason(reason) -> str:
    """Reduce a provider block reason (enum or text) to its bare name."""
    text = getattr(reason, "name", None) or str(reason or "")
    # "BlockReason.SAFETY" / "block_reason: SAFETY" -> "SAFETY"
    match = re.search(r"([A-Z][A-Z_]+)\s*$", text)
    return match.group(1) if match else "UNSPECIFIED"
