"""
Prompt construction for the landscape redesign model.

Everything here is pure: the same inputs always produce the same prompt text.
"""
import json
import re
from typing import Sequence

from .styles import implies_arid, style_name

ARID_CLIMATE_PATTERN = re.compile(r"arid|desert", re.IGNORECASE)

CATALOG_SCHEMA = {
    "plants": [{"name": "string", "species": "string"}],
    "features": [{"name": "string", "description": "string"}],
}

DENSITY_INSTRUCTIONS = {
    "minimal": (
        "CRITICAL DENSITY INSTRUCTION: The user has selected a MINIMAL design. "
        "You MUST prioritize open space and simplicity above all else. Use a very limited "
        "number of high-impact plants and features. The final design must be clean, "
        "uncluttered, and feel spacious."
    ),
    "balanced": (
        "CRITICAL DENSITY INSTRUCTION: The user has selected a BALANCED design. "
        "You MUST create a harmonious mix of planted areas and functional open space "
        "(like lawn or patio). Avoid extremes: the design should not feel empty or overly "
        "crowded. The composition should be thoughtful and well-proportioned."
    ),
    "lush": (
        "CRITICAL DENSITY INSTRUCTION: The user has selected a LUSH design. "
        "This is a primary command. You MUST maximize planting to create a dense, layered, "
        "and abundant garden. Fill nearly all available softscape areas with a rich variety "
        "of plants, textures, and foliage. The goal is an immersive, vibrant landscape with "
        "very little empty or open space."
    ),
}

ARID_PLANT_GUIDANCE = (
    " For this arid climate, prioritize drought-tolerant plants. Excellent choices include "
    "succulents (like Agave, Aloe), cacti (like Prickly Pear), ornamental grasses (like Blue "
    "Grama), and hardy shrubs (like Sagebrush)."
)

LAYOUT_INSTRUCTION = """**CRITICAL RULE: Functional Access (No Exceptions):**
  - **Garages & Driveways:** You MUST identify all garage doors. A functional driveway MUST lead directly to each garage door and be kept completely clear of new plants, trees, hardscaping, or other obstructions. The driveway must stay at least as wide as the garage door it serves.
  - **All Other Doors:** EVERY door (front, side, patio) MUST keep a clear, direct pathway at least as wide as the door itself, connected to the driveway or a walkway. Do not isolate any doors."""


def structural_instruction(allow_structural_changes: bool) -> str:
    if allow_structural_changes:
        return (
            "You are allowed to make structural changes to the LANDSCAPE. This includes adding "
            "or altering hardscapes like pergolas, decks, stone patios, retaining walls, and "
            "pathways. This permission **DOES NOT** apply to the house. You are **STRICTLY "
            "FORBIDDEN** from altering the main building's architecture, windows, doors, or roof."
        )
    return (
        "**ABSOLUTELY NO** structural changes. You are forbidden from adding, removing, or "
        "altering buildings, walls, gates, fences, driveways, or other permanent structures. "
        "Your redesign must focus exclusively on softscapes (plants, flowers, grass, mulch) and "
        "easily movable elements (outdoor furniture, pots, decorative items)."
    )


def object_instruction(allow_structural_changes: bool) -> str:
    if allow_structural_changes:
        return (
            "You MUST completely remove any people, animals, or vehicles from the property and "
            "seamlessly redesign the landscape area they were occupying. The ground underneath "
            "(grass, pavement, garden beds, etc.) must be filled in as part of the new design."
        )
    return (
        "You are **STRICTLY FORBIDDEN** from removing or altering any people, animals, or "
        "vehicles (cars, trucks, etc.). Treat all of these as permanent objects in the scene "
        "that must not be changed. Your design must work around them."
    )


def climate_instruction(climate_zone: str, styles: Sequence[str]) -> str:
    climate_zone = (climate_zone or "").strip()
    if not climate_zone:
        return (
            "Select plants and materials that are contextually appropriate for the visual "
            "context of the image."
        )
    instruction = (
        f"All plants, trees, and materials MUST be suitable for the '{climate_zone}' "
        f"climate/region."
    )
    # A desert-leaning style already brings drought-tolerant planting with it
    if ARID_CLIMATE_PATTERN.search(climate_zone) and not implies_arid(styles):
        instruction += ARID_PLANT_GUIDANCE
    return instruction


def aspect_ratio_instruction(lock_aspect_ratio: bool) -> str:
    if lock_aspect_ratio:
        return (
            "You MUST maintain the exact aspect ratio of the original input image. The output "
            "image dimensions must correspond to the input image dimensions."
        )
    return "Preserve the original aspect ratio if possible."


def density_instruction(density: str) -> str:
    return DENSITY_INSTRUCTIONS.get(density, DENSITY_INSTRUCTIONS["balanced"])


def style_instruction(styles: Sequence[str]) -> str:
    names = [style_name(s) for s in styles]
    if len(names) > 1:
        joined = "' and '".join(names)
        return (
            f"Redesign the landscape in a blended style that combines '{joined}'. "
            f"Prioritize a harmonious fusion of these aesthetics."
        )
    return f"Redesign the landscape in a '{names[0]}' style."


def build_prompt(
    styles: Sequence[str],
    allow_structural_changes: bool,
    climate_zone: str,
    lock_aspect_ratio: bool,
    density: str,
) -> str:
    """Compose the full instruction text for one redesign attempt."""
    schema = json.dumps(CATALOG_SCHEMA, indent=2)

    return f"""
You are an expert AI landscape designer. Your task is to perform an in-place edit of the user's provided image.

**CORE DIRECTIVE: MODIFY THE LANDSCAPE, PRESERVE THE PROPERTY**
You MUST use the user's uploaded image as the base for your work. Your sole purpose is to modify the *landscape* within that photo. You are **STRICTLY FORBIDDEN** from generating a completely new image, replacing the property, or altering the main house/building.

**CRITICAL RULE: THE HOUSE IS IMMUTABLE**
- **DO NOT** alter its architecture, color, materials, windows, doors, roof, or any part of its structure.
- **DO NOT** add or remove doors or windows.
- **DO NOT** change the color of the house paint, trim, or roof.
This rule takes precedence over all other instructions, including style requests.

{LAYOUT_INSTRUCTION}

**OUTPUT FORMAT**
Your response MUST begin with the image part: the first part of your response must be the redesigned image.
After the image, provide exactly one JSON object describing the new plants and features, optionally wrapped in a ```json code block. Do not add any introductory or conversational text.

**IMAGE REDESIGN INSTRUCTIONS:**
- **Style:** {style_instruction(styles)}
- **Style Application:** Applying a style means modifying ONLY the landscape elements (plants, paths, furniture, etc.) within the user's photo. It does NOT mean creating a new property or scene.
- **Image Quality:** The output MUST be ultra-photorealistic, sharply focused, with lighting that matches the original image. Avoid blurry, distorted, or artifacted results.
- **No Textual Labels:** Never add text, signs, or labels naming the style anywhere in the image.
- **Object Handling:** {object_instruction(allow_structural_changes)}
- **Structural Landscape Changes:** {structural_instruction(allow_structural_changes)}
- **Climate:** {climate_instruction(climate_zone, styles)}
- **Aspect Ratio:** {aspect_ratio_instruction(lock_aspect_ratio)}
- **Design Density:** {density_instruction(density)}

**JSON SCHEMA (for the text part):**
{schema}
- Every plant in the JSON catalog must be suitable for the specified climate.
- If a category is empty, provide an empty list [].
"""
