import json
import logging
import re
from typing import Optional

from .schemas import DesignCatalog

logger = logging.getLogger(__name__)

FENCED_JSON_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)


def extract_fenced_json(text: str) -> Optional[str]:
    match = FENCED_JSON_PATTERN.search(text or "")
    if match and match.group(1):
        return match.group(1)
    return None


def extract_braced_json(text: str) -> Optional[str]:
    text = text or ""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]
    return None


def parse_design_catalog(text: str) -> Optional[DesignCatalog]:
    """
    Pull the design catalog out of free model text.
    Tries a fenced ```json block first, then the span between the first '{'
    and the last '}'. Returns None when neither yields a JSON object.
    """
    candidate = extract_fenced_json(text)
    if candidate is None:
        candidate = extract_braced_json(text)
    if candidate is None:
        return None

    try:
        data = json.loads(candidate)
    except ValueError as e:
        logger.warning(f"Could not parse design catalog JSON: {e}")
        return None

    if not isinstance(data, dict):
        return None
    return DesignCatalog.from_dict(data)


def catalog_from_text(text: str) -> DesignCatalog:
    """Like parse_design_catalog, but never fails: falls back to an empty catalog."""
    catalog = parse_design_catalog(text)
    if catalog is None:
        logger.info("No design catalog found in model text, using empty catalog")
        return DesignCatalog.empty()
    return catalog
