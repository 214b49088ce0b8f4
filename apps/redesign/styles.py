MAX_STYLES = 2

DENSITIES = ("minimal", "balanced", "lush")

# Closed style catalog. `implies_arid` marks styles whose own vocabulary already
# carries drought-tolerant planting, so climate advice need not restate it.
LANDSCAPING_STYLES = [
    {"id": "modern", "name": "Modern", "implies_arid": False},
    {"id": "minimalist", "name": "Minimalist", "implies_arid": False},
    {"id": "english_cottage", "name": "English Cottage", "implies_arid": False},
    {"id": "japanese", "name": "Japanese Garden", "implies_arid": False},
    {"id": "mediterranean", "name": "Mediterranean", "implies_arid": False},
    {"id": "tropical", "name": "Tropical", "implies_arid": False},
    {"id": "desert", "name": "Desert", "implies_arid": True},
    {"id": "xeriscape", "name": "Xeriscape", "implies_arid": True},
    {"id": "farmhouse", "name": "Modern Farmhouse", "implies_arid": False},
    {"id": "woodland", "name": "Woodland", "implies_arid": False},
    {"id": "zen", "name": "Zen", "implies_arid": False},
    {"id": "formal", "name": "Formal French", "implies_arid": False},
]

STYLE_IDS = frozenset(style["id"] for style in LANDSCAPING_STYLES)

_BY_ID = {style["id"]: style for style in LANDSCAPING_STYLES}


def style_name(style_id: str) -> str:
    style = _BY_ID.get(style_id)
    return style["name"] if style else style_id


def implies_arid(styles) -> bool:
    return any(_BY_ID.get(s, {}).get("implies_arid") for s in styles)
