"""
Prompt construction for each marketing category.

Every prompt ends with FIDELITY_CLAUSE so the model keeps the product
exactly as it appears in the input image.
"""

from typing import Optional

from megapost.models.schemas import Category

FIDELITY_CLAUSE = (
    "It is CRUCIAL AND MANDATORY that the product in the generated image is a "
    "PERFECT replica of the product in the provided image. DO NOT change its "
    "shape, color, texture, logos or any other details. The product must be "
    "100% faithful to the original."
)

GIF_FRAME_INSTRUCTION = (
    "The input image is an animated GIF; please select the clearest and most "
    "representative frame of the product to use as the base for the new image."
)

CATEGORY_PROMPTS = {
    Category.LIFESTYLE: (
        "Create a realistic, high-quality lifestyle photograph using this product. "
        "The scene should feel authentic, with the product naturally integrated "
        "into an everyday environment or being used by a person."
    ),
    Category.PRODUCT: (
        "Generate a clean, professional product photo (mockup) of this item, "
        "presenting it on a pedestal or minimalist surface (marble, concrete, "
        "light wood) against a neutral-colored background. The lighting should "
        "be studio lighting that highlights the product details."
    ),
    Category.ANGLED_PRODUCT: (
        "Generate a clean, professional product photo (mockup) of this item, "
        "captured from a dynamic angle to show the depth and details of the "
        "product. The item should be presented on a minimalist surface (marble, "
        "concrete, light wood) against a neutral-colored background. The "
        "lighting should be studio lighting, creating soft shadows that enhance "
        "the shape of the product."
    ),
    Category.MODEL: (
        "Create a modern studio image with a stylish model interacting with the "
        "product in a positive and natural way. The background should be a "
        "solid, vibrant color that complements the product."
    ),
    Category.GIF: (
        "Create a static image that captures the energy and movement of an "
        "animated GIF. The scene should be dynamic and eye-catching, using "
        "vibrant colors, perhaps with motion lines or a color-burst effect in "
        "the background."
    ),
    Category.STORY: (
        "Create an attractive marketing image for Instagram and WhatsApp "
        "stories. The image should be vibrant, grab attention and have clear "
        "space for adding text or logos. The format MUST be vertical (9:16 "
        "aspect ratio)."
    ),
    Category.TRANSPARENT_BG: (
        "Generate a product image with a perfectly transparent background. The "
        "output format MUST be PNG. The product must be completely isolated, "
        "with no shadows or reflections on the floor."
    ),
}

GENERIC_PROMPT = "Generate an image using this product."


def get_prompt_for_category(category) -> str:
    """
    Return the instruction for a category, always ending with the fidelity clause.

    Unknown categories get a generic instruction.
    """
    try:
        instruction = CATEGORY_PROMPTS[Category(category)]
    except ValueError:
        instruction = GENERIC_PROMPT
    return f"{instruction} {FIDELITY_CLAUSE}"


def build_prompt(category, source_mime_type: Optional[str] = None) -> str:
    """
    Build the full prompt sent with the source image.

    GIF sources get a frame-selection hint in front of the category prompt.
    """
    prompt = get_prompt_for_category(category)
    if source_mime_type == "image/gif":
        prompt = f"{GIF_FRAME_INSTRUCTION} {prompt}"
    return prompt
