"""
Generation Orchestrator

Fans one source image out to one generation call per category, tracks
each category's state independently and aggregates bulk progress.

All state changes happen on the event loop running the orchestrator, so
no locking is needed. Each selected image starts a new epoch; completions
from an older epoch are dropped instead of overwriting fresh results.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from megapost.config import DEFAULT_MODEL
from megapost.models.schemas import ALL_CATEGORIES, Category, CategoryState, CategoryStates, SourceImage
from .errors import NoSourceImage
from .gemini_generator import generate_category_image

logger = logging.getLogger(__name__)

GenerateFn = Callable[[SourceImage, Category], Awaitable[str]]
UpdateCallback = Callable[[Category, CategoryState, int], None]

UNKNOWN_ERROR = "An unknown error occurred"


class GenerationOrchestrator:
    """Per-category generation state for one source image at a time"""

    def __init__(
        self,
        generate_fn: Optional[GenerateFn] = None,
        on_update: Optional[UpdateCallback] = None,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
    ):
        """
        Args:
            generate_fn: async (source, category) -> data URI; defaults to Gemini
            on_update: Called after every state change with (category, state, progress)
            api_key: Google API key passed to the default generator
            model: Gemini model passed to the default generator
        """
        if generate_fn is None:
            async def generate_fn(source, category):
                return await generate_category_image(source, category, api_key=api_key, model=model)

        self._generate = generate_fn
        self._on_update = on_update
        self.source_image: Optional[SourceImage] = None
        self.states = CategoryStates()
        self.completed_count = 0
        self._epoch = 0
        self._bulk_run = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def progress(self) -> int:
        """Percent of categories finished in the current bulk run"""
        return round(self.completed_count / len(ALL_CATEGORIES) * 100)

    @property
    def is_generating(self) -> bool:
        return self.states.is_generating

    @property
    def has_generated_images(self) -> bool:
        return self.states.has_generated_images

    def select_image(self, source: Optional[SourceImage]) -> None:
        """
        Replace the source image (None clears it).

        Resets every category and the progress counter. Calls still in
        flight for the previous image are not cancelled, their results
        are discarded when they arrive.
        """
        self._epoch += 1
        self.source_image = source
        self.states.reset()
        self.completed_count = 0
        if source is not None:
            logger.info("Selected %s (%s, %d bytes)", source.filename, source.mime_type, source.size)

    async def generate_all(self) -> CategoryStates:
        """
        Generate every category concurrently.

        Each category counts toward progress when it finishes, whether it
        succeeded or failed.

        Raises:
            NoSourceImage: If no image is selected
        """
        if self.source_image is None:
            raise NoSourceImage("Select an image before generating")

        if self.is_generating:
            logger.warning("Generation already running, ignoring bulk generate")
            return self.states

        self._bulk_run += 1
        self.completed_count = 0
        epoch, run = self._epoch, self._bulk_run

        await asyncio.gather(*[
            self._run_category(category, epoch, run)
            for category in ALL_CATEGORIES
        ])
        return self.states

    async def regenerate(self, category) -> bool:
        """
        Generate a single category again, leaving the others and progress alone.

        Returns:
            bool: False if ignored (no image, or the category is already running)

        Raises:
            ValueError: If the category is unknown
        """
        category = Category(category)
        if self.source_image is None:
            logger.warning("No image selected, ignoring regenerate of %s", category.value)
            return False

        if self.states[category].is_loading:
            logger.info("%s is already generating, ignoring regenerate", category.value)
            return False

        await self._run_category(category, self._epoch, None)
        return True

    async def _run_category(self, category: Category, epoch: int, run: Optional[int]) -> None:
        state = self.states[category]
        source = self.source_image

        state.mark_in_progress()
        self._notify(category, state)

        try:
            image_url = await self._generate(source, category)
        except Exception as e:
            if epoch != self._epoch:
                logger.debug("Discarding stale failure for %s", category.value)
                return
            logger.warning("Generation failed for %s: %s", category.value, e)
            state.mark_failed(str(e) or UNKNOWN_ERROR)
        else:
            if epoch != self._epoch:
                logger.debug("Discarding stale result for %s", category.value)
                return
            state.mark_succeeded(image_url)

        if run is not None and run == self._bulk_run:
            self.completed_count += 1

        self._notify(category, state)

    def _notify(self, category: Category, state: CategoryState) -> None:
        if not self._on_update:
            return
        try:
            self._on_update(category, state, self.progress)
        except Exception:
            logger.exception("Update callback failed for %s", category.value)
