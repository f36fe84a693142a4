"""
Prompt generation for material-aware furniture inpainting.

Everything here is a pure function of its inputs: unknown materials, parts or
colors degrade to generic phrases instead of failing, since the inference
models accept free text.
"""
from typing import Dict

MATERIAL_TYPES: Dict[str, str] = {
    "leather": "premium leather texture",
    "fabric": "high-end textile weave",
    "wood": "natural wood grain",
    "metal": "brushed metal finish",
    "velvet": "luxurious velvet upholstery",
    "linen": "natural linen fabric",
    "cotton": "premium cotton blend",
    "microfiber": "soft microfiber material",
}

FURNITURE_PARTS: Dict[str, str] = {
    "cushion": "sofa cushion",
    "seat": "chair seat",
    "backrest": "chair backrest",
    "armrest": "chair armrest",
    "leg": "furniture leg",
    "table_top": "table surface",
    "drawer": "drawer front",
    "door": "cabinet door",
    "frame": "furniture frame",
}

DEFAULT_MATERIAL_PHRASE = "premium material"
DEFAULT_PART_PHRASE = "furniture part"

COLOR_NAMES: Dict[str, str] = {
    "#FF0000": "red",
    "#00FF00": "green",
    "#0000FF": "blue",
    "#FFFF00": "yellow",
    "#FF00FF": "magenta",
    "#00FFFF": "cyan",
    "#000000": "black",
    "#FFFFFF": "white",
    "#808080": "gray",
    "#800000": "maroon",
    "#008000": "dark green",
    "#000080": "navy",
    "#FFA500": "orange",
    "#800080": "purple",
    "#A52A2A": "brown",
    "#FFC0CB": "pink",
    "#F5DEB3": "wheat",
    "#D2B48C": "tan",
    "#8B4513": "saddle brown",
    "#2F4F4F": "dark slate gray",
}

NEGATIVE_PROMPT = "blurry, low quality, distorted, deformed, pixelated"


def get_color_name(color: str) -> str:
    """
    Resolve a color token to a human-readable name.

    Known hex values map to their name, other hex values degrade to
    ``"color #RRGGBB"``; anything that is not a hex code (e.g. ``"red"``)
    is already a name and is returned as-is.
    """
    if not color.startswith("#"):
        return color
    return COLOR_NAMES.get(color.upper(), f"color {color}")


def describe_material(material: str) -> str:
    return MATERIAL_TYPES.get(material, DEFAULT_MATERIAL_PHRASE)


def describe_part(furniture_part: str) -> str:
    return FURNITURE_PARTS.get(furniture_part, DEFAULT_PART_PHRASE)


def generate_inpainting_prompt(furniture_part: str, material: str, color: str) -> str:
    """Build the FLUX Fill prompt for repainting one furniture part in a given material and color"""
    return (
        f"Photorealistic {describe_material(material)} on {describe_part(furniture_part)}, {color}, "
        "professional product photography, 8k resolution, maintaining original lighting and shadows, "
        "seamless material transition, no color bleeding, precise edges"
    )


def generate_recolor_prompt(color_name: str, material: str, furniture_part: str) -> str:
    """Build the shorter SDXL prompt used by the one-shot recolor"""
    return (
        f"{color_name} {material} {furniture_part}, professional furniture photography, high-end, realistic, "
        "maintaining original lighting and shadows, seamless material transition, photorealistic"
    )
