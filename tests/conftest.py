import io
from types import SimpleNamespace

import pytest
from PIL import Image

from megapost.models.schemas import SourceImage


def make_png(color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", (16, 16), color).save(buffer, format="PNG")
    return buffer.getvalue()


def image_response(data=b"generated-bytes", mime_type="image/png"):
    part = SimpleNamespace(
        inline_data=SimpleNamespace(data=data, mime_type=mime_type),
        text=None,
    )
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def text_response(text):
    part = SimpleNamespace(inline_data=None, text=text)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


class FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return self.response


class FakeClient:
    """Stands in for genai.Client, exposing client.aio.models.generate_content"""

    def __init__(self, response=None, error=None):
        self.models = FakeModels(response, error)
        self.aio = SimpleNamespace(models=self.models)


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def source_image(png_bytes):
    return SourceImage(data=png_bytes, filename="photo.png", mime_type="image/png")


@pytest.fixture(autouse=True)
def clear_api_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
