import pytest

from megapost.models.schemas import ALL_CATEGORIES, Category
from megapost.services.prompt_builder import (
    FIDELITY_CLAUSE,
    GENERIC_PROMPT,
    GIF_FRAME_INSTRUCTION,
    build_prompt,
    get_prompt_for_category,
)


@pytest.mark.parametrize("category", ALL_CATEGORIES)
def test_every_prompt_ends_with_fidelity_clause(category):
    assert get_prompt_for_category(category).endswith(FIDELITY_CLAUSE)


def test_story_prompt_requests_vertical_format():
    prompt = get_prompt_for_category(Category.STORY)
    assert "9:16" in prompt
    assert "vertical" in prompt
    assert FIDELITY_CLAUSE in prompt


def test_prompts_are_distinct_per_category():
    prompts = {get_prompt_for_category(category) for category in ALL_CATEGORIES}
    assert len(prompts) == len(ALL_CATEGORIES)


def test_string_category_value_is_accepted():
    assert get_prompt_for_category("story") == get_prompt_for_category(Category.STORY)


def test_unknown_category_falls_back_to_generic_prompt():
    assert get_prompt_for_category("poster") == f"{GENERIC_PROMPT} {FIDELITY_CLAUSE}"


def test_gif_source_gets_frame_hint_first():
    prompt = build_prompt(Category.PRODUCT, "image/gif")
    assert prompt.startswith(GIF_FRAME_INSTRUCTION)
    assert prompt.endswith(get_prompt_for_category(Category.PRODUCT))


def test_non_gif_source_has_no_frame_hint():
    prompt = build_prompt(Category.PRODUCT, "image/png")
    assert GIF_FRAME_INSTRUCTION not in prompt
    assert prompt == get_prompt_for_category(Category.PRODUCT)
