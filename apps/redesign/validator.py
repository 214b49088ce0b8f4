import json
import logging

from apps.nano_banana import client as nano_banana
from apps.nano_banana.prompt_template import VALIDATION_RUBRIC
from .errors import ValidatorSchemaError
from .schemas import VALIDATION_CRITERIA, RedesignRequest, ValidationResult
from .styles import style_name

logger = logging.getLogger(__name__)


def build_rubric(request: RedesignRequest) -> str:
    styles = " + ".join(style_name(s) for s in request.styles)

    if request.lock_aspect_ratio:
        aspect_ratio_rule = "The redesign has the same aspect ratio as the original image."
    else:
        aspect_ratio_rule = "The redesign keeps a similar framing to the original (exact aspect ratio not required)."

    if request.allow_structural_changes:
        structural_rule = (
            "Landscape hardscape changes are allowed, but the house itself is untouched and "
            "people, animals and vehicles have been removed cleanly."
        )
    else:
        structural_rule = (
            "No permanent structures (walls, fences, gates, driveways, buildings) were added, removed "
            "or altered, and people, animals and vehicles are left exactly as they were."
        )

    if request.climate_zone:
        climate_rule = f"All visible plants and materials suit the '{request.climate_zone}' climate/region."
    else:
        climate_rule = "Plants and materials are plausible for the setting visible in the original photo."

    return VALIDATION_RUBRIC.format(
        styles=styles,
        aspect_ratio_rule=aspect_ratio_rule,
        structural_rule=structural_rule,
        climate_rule=climate_rule,
        density=request.density,
    )


def parse_validation(text: str) -> ValidationResult:
    """Strictly parse the validator JSON. Any schema deviation raises ValidatorSchemaError."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ValidatorSchemaError([f"Validator returned invalid JSON: {e}"]) from e

    if not isinstance(data, dict):
        raise ValidatorSchemaError(["Validator response is not an object"])

    flags = {}
    for name in VALIDATION_CRITERIA:
        value = data.get(name)
        if not isinstance(value, bool):
            raise ValidatorSchemaError([f"Validator field '{name}' missing or not boolean"])
        flags[name] = value

    reasons = data.get("reasons")
    if not isinstance(reasons, list) or not all(isinstance(r, str) for r in reasons):
        raise ValidatorSchemaError(["Validator field 'reasons' missing or not a list of strings"])

    return ValidationResult(reasons=reasons, **flags)


class Validator:
    """
    Second model pass that grades a generated redesign against the original.

    If the validator call itself fails (network, provider, timeout) the result
    fails open: every criterion passes with no reasons, so a validator outage
    never blocks a user from receiving their redesign. Schema violations in a
    response that did arrive are NOT forgiven; they raise ValidatorSchemaError.
    """

    def __init__(self, call=None):
        self.call = call or nano_banana.validate_images

    def validate(self, original_image: bytes, original_mime: str, generated_image: bytes,
                 generated_mime: str, request: RedesignRequest) -> ValidationResult:
        rubric = build_rubric(request)
        try:
            text = self.call(original_image, original_mime, generated_image, generated_mime, rubric)
        except Exception as e:
            # Any failure of the call itself (ValidatorUnavailable or a transport error) fails open
            logger.warning(f"Validator unavailable, treating redesign as passing: {e!r}")
            return ValidationResult.passing()

        result = parse_validation(text)
        if not result.overall_pass:
            logger.info(f"Validation failed on {result.failed_criteria()}: {result.reasons}")
        return result
