import asyncio
import base64

import pytest

from conftest import FakeClient, image_response, text_response
from megapost.models.schemas import Category, SourceImage
from megapost.services.errors import MissingCredential, NoImageInResponse, UnsupportedMediaType, UpstreamFailure
from megapost.services.gemini_generator import generate_category_image, generate_image
from megapost.services.image_converter import encode_image
from megapost.services.prompt_builder import GIF_FRAME_INSTRUCTION


def test_returns_data_uri_of_first_image(png_bytes):
    client = FakeClient(response=image_response(b"out", "image/png"))
    image = encode_image(png_bytes, "photo.png")

    result = asyncio.run(generate_image(image, "make it shine", api_key="test-key", client=client))

    assert result == "data:image/png;base64," + base64.b64encode(b"out").decode()
    call = client.models.calls[0]
    assert call["config"].response_modalities == ["IMAGE"]
    parts = call["contents"][0].parts
    assert parts[0].inline_data.data == png_bytes
    assert parts[0].inline_data.mime_type == "image/png"
    assert parts[1].text == "make it shine"


def test_missing_credential_checked_before_call(png_bytes):
    client = FakeClient(response=image_response())
    image = encode_image(png_bytes, "photo.png")

    with pytest.raises(MissingCredential):
        asyncio.run(generate_image(image, "prompt", client=client))
    assert client.models.calls == []


def test_api_key_read_from_environment(monkeypatch, png_bytes):
    monkeypatch.setenv("GOOGLE_API_KEY", "env-key")
    client = FakeClient(response=image_response())

    asyncio.run(generate_image(encode_image(png_bytes, "photo.png"), "prompt", client=client))
    assert len(client.models.calls) == 1


def test_no_image_in_response(png_bytes):
    client = FakeClient(response=text_response("I cannot do that"))

    with pytest.raises(NoImageInResponse) as excinfo:
        asyncio.run(generate_image(encode_image(png_bytes, "photo.png"), "prompt", api_key="k", client=client))
    assert "I cannot do that" in str(excinfo.value)


def test_empty_candidates_is_no_image(png_bytes):
    client = FakeClient(response=image_response())
    client.models.response.candidates = []

    with pytest.raises(NoImageInResponse):
        asyncio.run(generate_image(encode_image(png_bytes, "photo.png"), "prompt", api_key="k", client=client))


def test_upstream_error_is_wrapped_with_message(png_bytes):
    client = FakeClient(error=ConnectionError("quota exceeded"))

    with pytest.raises(UpstreamFailure) as excinfo:
        asyncio.run(generate_image(encode_image(png_bytes, "photo.png"), "prompt", api_key="k", client=client))
    assert excinfo.value.upstream_message == "quota exceeded"
    assert "quota exceeded" in str(excinfo.value)


def test_category_image_uses_category_prompt(source_image):
    client = FakeClient(response=image_response())

    asyncio.run(generate_category_image(source_image, Category.STORY, api_key="k", client=client))

    prompt = client.models.calls[0]["contents"][0].parts[1].text
    assert "9:16" in prompt
    assert GIF_FRAME_INSTRUCTION not in prompt


def test_category_image_adds_gif_hint():
    client = FakeClient(response=image_response())
    source = SourceImage(data=b"GIF89a", filename="clip.gif", mime_type="image/gif")

    asyncio.run(generate_category_image(source, Category.MODEL, api_key="k", client=client))

    prompt = client.models.calls[0]["contents"][0].parts[1].text
    assert prompt.startswith(GIF_FRAME_INSTRUCTION)


def test_category_image_rejects_unsupported_file():
    client = FakeClient(response=image_response())
    source = SourceImage(data=b"text", filename="doc.txt", mime_type="text/plain")

    with pytest.raises(UnsupportedMediaType):
        asyncio.run(generate_category_image(source, Category.MODEL, api_key="k", client=client))
    assert client.models.calls == []
