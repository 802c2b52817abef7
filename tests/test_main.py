import os

import pytest

from megapost import main as cli
from megapost.models.schemas import ALL_CATEGORIES, Category
from megapost.services.downloads import download_filename
from megapost.services.orchestrator import GenerationOrchestrator


def test_parse_args():
    source, categories, output_dir = cli.parse_args(
        ["mug.png", "--category", "story", "--category", "model", "--output", "out"]
    )
    assert source == "mug.png"
    assert categories == [Category.STORY, Category.MODEL]
    assert output_dir == "out"


@pytest.mark.parametrize("args", [
    [],
    ["mug.png", "--category"],
    ["mug.png", "--category", "poster"],
    ["mug.png", "other.png"],
])
def test_parse_args_errors(args):
    with pytest.raises(ValueError):
        cli.parse_args(args)


def test_no_arguments_exits_with_error():
    assert cli.main([]) == 1


def test_help():
    assert cli.main(["--help"]) == 0


def test_missing_api_key_blocks_before_loading(tmp_path, capsys):
    assert cli.main([str(tmp_path / "missing.png")]) == 1
    assert "GOOGLE_API_KEY" in capsys.readouterr().out


def test_generates_and_saves_all_images(tmp_path, monkeypatch, png_bytes):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    image_path = tmp_path / "mug.png"
    image_path.write_bytes(png_bytes)
    output_dir = tmp_path / "out"

    async def fake_generate(source, category):
        return "data:image/png;base64,aW1n"

    monkeypatch.setattr(
        cli, "GenerationOrchestrator",
        lambda **kwargs: GenerationOrchestrator(generate_fn=fake_generate, on_update=kwargs.get("on_update")),
    )

    assert cli.main([str(image_path), "--output", str(output_dir)]) == 0
    assert sorted(os.listdir(output_dir)) == sorted(download_filename(c) for c in ALL_CATEGORIES)


def test_only_requested_categories(tmp_path, monkeypatch, png_bytes):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    image_path = tmp_path / "mug.png"
    image_path.write_bytes(png_bytes)
    output_dir = tmp_path / "out"

    async def fake_generate(source, category):
        return "data:image/png;base64,aW1n"

    monkeypatch.setattr(
        cli, "GenerationOrchestrator",
        lambda **kwargs: GenerationOrchestrator(generate_fn=fake_generate),
    )

    assert cli.main([str(image_path), "--category", "story", "--output", str(output_dir)]) == 0
    assert os.listdir(output_dir) == [download_filename(Category.STORY)]


def test_all_failures_exit_with_error(tmp_path, monkeypatch, png_bytes):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    image_path = tmp_path / "mug.png"
    image_path.write_bytes(png_bytes)

    async def failing_generate(source, category):
        raise RuntimeError("quota exceeded")

    monkeypatch.setattr(
        cli, "GenerationOrchestrator",
        lambda **kwargs: GenerationOrchestrator(generate_fn=failing_generate),
    )

    assert cli.main([str(image_path), "--output", str(tmp_path / "out")]) == 1
