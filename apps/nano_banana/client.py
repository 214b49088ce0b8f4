import google.generativeai as genai
from google.api_core.exceptions import GoogleAPIError
from django.conf import settings
from typing import List, Tuple, TypedDict
import json
import logging

from apps.redesign.catalog import catalog_from_text
from apps.redesign.errors import (
    GenerationBlocked,
    GenerationEmpty,
    GenerationError,
    ValidatorUnavailable,
    sanitize_block_reason,
)
from apps.redesign.schemas import GenerationResult
from .prompt_template import ELEMENT_IMAGE_PROMPT, ELEMENT_INFO_PROMPT, REPLACEMENTS_PROMPT

logger = logging.getLogger(__name__)


class ValidationResponse(TypedDict):
    property_consistency: bool
    style_accuracy: bool
    aspect_ratio_compliance: bool
    structural_change_rules: bool
    location_climate_respect: bool
    redesign_density: bool
    authenticity_guard: bool
    reasons: List[str]


def _model(model_name: str, **kwargs):
    if not settings.GEMINI_API_KEY:
        raise GenerationError("GEMINI_API_KEY not configured.")
    genai.configure(api_key=settings.GEMINI_API_KEY)
    return genai.GenerativeModel(model_name, **kwargs)


def _request_options():
    return {"timeout": settings.GEMINI_TIMEOUT_SECONDS}


def generate_redesign(image_bytes: bytes, mime_type: str, prompt: str) -> GenerationResult:
    """
    Call Gemini 2.5 Flash Image (Nano Banana) to redesign the landscape.
    Returns the first inline image plus the design catalog scraped from the text parts.
    """
    model = _model(settings.GEMINI_IMAGE_MODEL)
    contents = [{"mime_type": mime_type, "data": image_bytes}, prompt]

    response = model.generate_content(contents, request_options=_request_options())

    result_image, result_mime, result_text = _image_and_text(response)

    return GenerationResult(
        image_bytes=result_image,
        mime_type=result_mime,
        catalog=catalog_from_text(result_text),
    )


def _image_and_text(response):
    """
    Walk the first candidate for its first inline image and any text parts.
    Raises GenerationBlocked / GenerationEmpty when there is no image to return.
    """
    feedback = getattr(response, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None)
    if block_reason:
        reason = sanitize_block_reason(block_reason)
        logger.warning(f"Gemini blocked the request: {reason}")
        raise GenerationBlocked(reason)

    candidates = list(getattr(response, "candidates", None) or [])
    if not candidates:
        raise GenerationEmpty("The model returned no candidates.")

    result_text = ""
    result_image = None
    result_mime = None

    # Process all parts of the first candidate
    for part in candidates[0].content.parts:
        inline_data = getattr(part, "inline_data", None)
        if inline_data and inline_data.data and result_image is None:
            result_image = inline_data.data
            result_mime = inline_data.mime_type or "image/png"
            logger.info("Found image in response.inline_data (%d bytes)", len(result_image))
        elif getattr(part, "text", None):
            result_text += part.text + "\n"

    if result_image is None:
        logger.info("Gemini response contains text only (no image found)")
        raise GenerationEmpty("No image was found in the model response.")

    return result_image, result_mime, result_text


def generate_element_image(name: str, description: str = "") -> Tuple[bytes, str]:
    """Render one landscape element on its own. Returns (image bytes, mime type)."""
    model = _model(settings.GEMINI_IMAGE_MODEL)
    detail = f" {description.strip()}" if description and description.strip() else ""
    prompt = ELEMENT_IMAGE_PROMPT.format(name=name, description=detail)

    response = model.generate_content(prompt, request_options=_request_options())
    image_bytes, mime_type, _ = _image_and_text(response)
    return image_bytes, mime_type


def validate_images(original_bytes: bytes, original_mime: str, redesigned_bytes: bytes,
                    redesigned_mime: str, rubric: str) -> str:
    """Ask the text model to grade the redesign; returns the raw JSON text."""
    model = _model(
        settings.GEMINI_TEXT_MODEL,
        generation_config=genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=ValidationResponse,
            temperature=0,
        ),
    )
    contents = [
        {"mime_type": original_mime, "data": original_bytes},
        {"mime_type": redesigned_mime, "data": redesigned_bytes},
        rubric,
    ]
    try:
        response = model.generate_content(contents, request_options=_request_options())
        return response.text
    except (GoogleAPIError, ValueError) as e:
        # ValueError: response carried no candidates to read text from
        raise ValidatorUnavailable(str(e)) from e


def describe_element(name: str) -> str:
    model = _model(settings.GEMINI_TEXT_MODEL)
    response = model.generate_content(ELEMENT_INFO_PROMPT.format(name=name), request_options=_request_options())
    return (response.text or "").strip()


def suggest_replacements(name: str, style_names: List[str], climate_zone: str = "") -> List[str]:
    model = _model(
        settings.GEMINI_TEXT_MODEL,
        generation_config=genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=list[str],
        ),
    )
    climate_clause = f" for the '{climate_zone}' climate" if climate_zone else ""
    prompt = REPLACEMENTS_PROMPT.format(
        name=name,
        styles=" and ".join(style_names),
        climate_clause=climate_clause,
    )
    response = model.generate_content(prompt, request_options=_request_options())
    suggestions = json.loads(response.text)
    if not isinstance(suggestions, list):
        raise GenerationError("Replacement suggestions were not a list.")
    return [str(s) for s in suggestions if s][:5]
