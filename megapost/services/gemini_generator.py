"""
Gemini Image Generation Service

Sends the source product image and a category prompt to Gemini and
returns the first generated image as a data URI.
"""

import logging
from typing import Optional

from google import genai
from google.genai import types

from megapost.config import DEFAULT_MODEL, get_api_key
from megapost.models.schemas import InlineImage, SourceImage
from .errors import MissingCredential, NoImageInResponse, UpstreamFailure
from .image_converter import encode_source_image, to_data_uri
from .prompt_builder import build_prompt

logger = logging.getLogger(__name__)


def _first_image_part(response):
    """Return the first inline image part of a response, or None"""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        if content is None or not content.parts:
            continue
        for part in content.parts:
            if part.inline_data and part.inline_data.data:
                return part
    return None


def _text_parts(response):
    texts = []
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        if content is None or not content.parts:
            continue
        texts.extend(part.text for part in content.parts if getattr(part, "text", None))
    return texts


async def generate_image(image: InlineImage, prompt: str, api_key=None, client=None, model=DEFAULT_MODEL):
    """
    Generate one image from an inline source image and a prompt.

    Args:
        image: Encoded source image
        prompt: Instruction text for the model
        api_key: Google API key (optional, reads from env)
        client: Pre-built genai.Client (optional)
        model: Gemini model name

    Returns:
        str: data URI of the first image in the response

    Raises:
        MissingCredential: If no API key is configured
        NoImageInResponse: If the response has no image part
        UpstreamFailure: If the API call fails
    """
    if api_key is None:
        api_key = get_api_key()
    if not api_key:
        raise MissingCredential("GOOGLE_API_KEY not found in environment variables")

    if client is None:
        client = genai.Client(api_key=api_key)

    contents = [
        types.Content(
            role="user",
            parts=[
                types.Part.from_bytes(data=image.to_bytes(), mime_type=image.mime_type),
                types.Part.from_text(text=prompt),
            ],
        )
    ]

    # Image only, no text
    generate_content_config = types.GenerateContentConfig(
        response_modalities=["IMAGE"],
    )

    try:
        response = await client.aio.models.generate_content(
            model=model,
            contents=contents,
            config=generate_content_config,
        )
    except Exception as e:
        logger.exception("Error generating image with the Gemini API")
        raise UpstreamFailure(str(e) or e.__class__.__name__) from e

    part = _first_image_part(response)
    if part is None:
        error_msg = "No image generated in the response."
        texts = _text_parts(response)
        if texts:
            error_msg += f" Text response: {' '.join(texts)[:100]}"
        raise NoImageInResponse(error_msg)

    return to_data_uri(part.inline_data.mime_type or "image/png", part.inline_data.data)


async def generate_category_image(
    source: SourceImage,
    category,
    api_key: Optional[str] = None,
    client=None,
    model: str = DEFAULT_MODEL,
) -> str:
    """
    Generate the marketing variant of one category for a source image.

    Raises:
        UnsupportedMediaType: If the source filename has an unsupported extension
        plus everything generate_image() raises
    """
    image = encode_source_image(source)
    prompt = build_prompt(category, source.mime_type)
    logger.info("Generating %s image from %s", getattr(category, "value", category), source.filename)
    return await generate_image(image, prompt, api_key=api_key, client=client, model=model)
