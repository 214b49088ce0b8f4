VALIDATION_RUBRIC = """
You are a strict quality reviewer for an AI landscape redesign service.
The first image is the ORIGINAL property photo. The second image is the AI REDESIGN.

Judge the redesign against each criterion independently and answer true only if it clearly holds:

1. property_consistency: The house/building is the same property as the original. Architecture, windows, doors, roof and paint are unchanged, and the camera viewpoint matches.
2. style_accuracy: The new landscape clearly reflects the requested style(s): {styles}.
3. aspect_ratio_compliance: {aspect_ratio_rule}
4. structural_change_rules: {structural_rule}
5. location_climate_respect: {climate_rule}
6. redesign_density: The amount of planting matches the requested density: {density}.
7. authenticity_guard: The redesign is photorealistic, free of obvious AI artifacts, distortions and any text or labels naming the style.

For every criterion that fails, add one short human-readable reason to "reasons".
Respond with JSON only.
"""

ELEMENT_INFO_PROMPT = """
You are a friendly landscape design assistant. In two or three short paragraphs, describe the
landscape element "{name}": what it is, how it is typically used in a garden, and its basic care
or maintenance needs. Plain text only, no markdown headings.
"""

REPLACEMENTS_PROMPT = """
You are a landscape design assistant. Suggest up to 5 alternatives that could replace the landscape
element "{name}" in a garden designed in the {styles} style{climate_clause}.
Respond with a JSON array of short strings (element names only).
"""

ELEMENT_IMAGE_PROMPT = """
Create a single photorealistic image of the landscape element "{name}" on its own, isolated on a
plain light neutral background, softly lit, with no other plants, people or text in the frame.{description}
"""
