from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import InvalidRequest
from .styles import DENSITIES, MAX_STYLES, STYLE_IDS

@dataclass
class RedesignRequest:
    source_image: bytes
    mime_type: str
    styles: Tuple[str, ...]
    allow_structural_changes: bool = False
    climate_zone: str = ""
    lock_aspect_ratio: bool = True
    density: str = "balanced"

    def __post_init__(self):
        self.styles = tuple(self.styles)
        self.climate_zone = (self.climate_zone or "").strip()
        if not self.source_image:
            raise InvalidRequest("A source image is required")
        if not self.styles:
            raise InvalidRequest("At least one style must be selected")
        if len(self.styles) > MAX_STYLES:
            raise InvalidRequest(f"You can select up to {MAX_STYLES} styles")
        if len(set(self.styles)) != len(self.styles):
            raise InvalidRequest("Styles must not repeat")
        unknown = [s for s in self.styles if s not in STYLE_IDS]
        if unknown:
            raise InvalidRequest(f"Unknown style: {', '.join(unknown)}")
        if self.density not in DENSITIES:
            raise InvalidRequest(f"Unknown density: {self.density}")

@dataclass
class DesignCatalog:
    plants: List[Dict[str, str]] = field(default_factory=list)
    features: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "DesignCatalog":
        return cls()

    @classmethod
    def from_dict(cls, data: Any) -> "DesignCatalog":
        """Normalise loosely shaped model output into a well-formed catalog."""
        if not isinstance(data, dict):
            return cls.empty()
        return cls(
            plants=_entries(data.get("plants"), ("name", "species")),
            features=_entries(data.get("features"), ("name", "description")),
        )

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {"plants": list(self.plants), "features": list(self.features)}

    def is_empty(self) -> bool:
        return not self.plants and not self.features

def _entries(items: Any, keys: Tuple[str, str]) -> List[Dict[str, str]]:
    if not isinstance(items, list):
        return []
    cleaned = []
    for item in items:
        if not isinstance(item, dict):
            continue
        cleaned.append({key: str(item.get(key) or "") for key in keys})
    return cleaned

@dataclass
class GenerationResult:
    image_bytes: bytes
    mime_type: str
    catalog: DesignCatalog = field(default_factory=DesignCatalog)

VALIDATION_CRITERIA = (
    "property_consistency",
    "style_accuracy",
    "aspect_ratio_compliance",
    "structural_change_rules",
    "location_climate_respect",
    "redesign_density",
    "authenticity_guard",
)

@dataclass
class ValidationResult:
    property_consistency: bool = True
    style_accuracy: bool = True
    aspect_ratio_compliance: bool = True
    structural_change_rules: bool = True
    location_climate_respect: bool = True
    redesign_density: bool = True
    authenticity_guard: bool = True
    reasons: List[str] = field(default_factory=list)

    @property
    def overall_pass(self) -> bool:
        return all(getattr(self, name) for name in VALIDATION_CRITERIA)

    @classmethod
    def passing(cls) -> "ValidationResult":
        return cls()

    def failed_criteria(self) -> List[str]:
        return [name for name in VALIDATION_CRITERIA if not getattr(self, name)]

    def to_dict(self) -> Dict[str, Any]:
        data = {name: getattr(self, name) for name in VALIDATION_CRITERIA}
        data["reasons"] = list(self.reasons)
        data["overall_pass"] = self.overall_pass
        return data

@dataclass
class UsageStatus:
    used: int
    limit: int
    remaining: int
    has_reached_limit: bool
    is_unlimited: bool
    plan: str = "Free"

@dataclass
class WorkflowContext:
    """
    Explicit per-run context handed to the engine instead of ambient state.
    `notify(level, message)` surfaces progress to the user, `on_transition(state,
    attempt)` reports state changes, and `is_superseded()` reports whether a newer
    request from the same UI context replaced this one.
    """
    account: Any
    job_id: Optional[str] = None
    notify: Callable[[str, str], None] = lambda level, message: None
    on_transition: Callable[[str, int], None] = lambda state, attempt: None
    is_superseded: Callable[[], bool] = lambda: False

@dataclass
class WorkflowOutcome:
    state: str
    redesign: Any = None
    catalog: Optional[DesignCatalog] = None
    attempts: int = 0
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
    validation: Optional[ValidationResult] = None
    usage: Optional[UsageStatus] = None

    @property
    def succeeded(self) -> bool:
        return self.state == "SUCCESS"
