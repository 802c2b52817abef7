import io
import os
import zipfile

from megapost.models.schemas import ALL_CATEGORIES, Category
from megapost.services.downloads import build_zip, card_download_filename, download_filename, save_all_images
from megapost.services.image_converter import to_data_uri


def all_images():
    return {category: to_data_uri("image/png", category.value.encode()) for category in ALL_CATEGORIES}


def test_download_filename_uses_title():
    assert download_filename(Category.LIFESTYLE) == "megapost_Lifestyle.png"
    assert download_filename(Category.PRODUCT) == "megapost_Product_Mockup.png"
    assert download_filename("gif") == "megapost_Dynamic_Scene_(GIF_Style).png"


def test_download_filenames_are_distinct():
    names = {download_filename(category) for category in ALL_CATEGORIES}
    assert len(names) == 7
    assert all(" " not in name for name in names)


def test_card_download_filename():
    assert card_download_filename(Category.TRANSPARENT_BG) == "transparent_bg_image.png"


def test_save_all_images_writes_seven_files(tmp_path):
    saved = save_all_images(all_images(), str(tmp_path))

    assert len(saved) == 7
    assert sorted(os.listdir(tmp_path)) == sorted(download_filename(c) for c in ALL_CATEGORIES)
    assert (tmp_path / "megapost_Lifestyle.png").read_bytes() == b"lifestyle"


def test_save_all_images_skips_missing(tmp_path):
    images = all_images()
    images[Category.STORY] = None

    saved = save_all_images(images, str(tmp_path / "out"))

    assert len(saved) == 6
    assert not (tmp_path / "out" / download_filename(Category.STORY)).exists()


def test_build_zip():
    images = all_images()
    images[Category.MODEL] = None

    with zipfile.ZipFile(io.BytesIO(build_zip(images))) as zf:
        names = zf.namelist()
        assert zf.read("megapost_Lifestyle.png") == b"lifestyle"

    assert len(names) == 6
    assert download_filename(Category.MODEL) not in names


def test_downloads_module_compiles_without_newer_syntax():
    import megapost.services.downloads as downloads

    with open(downloads.__file__, encoding="utf-8") as f:
        source = f.read()
    compile(source, downloads.__file__, "exec")
    assert "{re.sub" not in source
