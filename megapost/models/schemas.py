"""
Data models for the Megapost generator

Categories, per-category generation state, the source image and the
progress payload pushed to web clients.
"""

import base64
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional


class Category(str, Enum):
    """The fixed set of marketing variants generated from one product image"""

    LIFESTYLE = "lifestyle"
    PRODUCT = "product"
    ANGLED_PRODUCT = "angled_product"
    MODEL = "model"
    GIF = "gif"
    STORY = "story"
    TRANSPARENT_BG = "transparent_bg"


# Launch and display order
ALL_CATEGORIES = (
    Category.LIFESTYLE,
    Category.PRODUCT,
    Category.ANGLED_PRODUCT,
    Category.MODEL,
    Category.GIF,
    Category.STORY,
    Category.TRANSPARENT_BG,
)

CATEGORY_TITLES = {
    Category.LIFESTYLE: "Lifestyle",
    Category.PRODUCT: "Product Mockup",
    Category.ANGLED_PRODUCT: "Angled Mockup",
    Category.MODEL: "With Model",
    Category.GIF: "Dynamic Scene (GIF Style)",
    Category.STORY: "Story (Insta and Whats)",
    Category.TRANSPARENT_BG: "No Background (PNG)",
}


class GenerationStatus(str, Enum):
    ABSENT = "absent"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class CategoryState:
    """Lifecycle of one category: absent -> in_progress -> succeeded | failed"""

    status: GenerationStatus = GenerationStatus.ABSENT
    image_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.status is GenerationStatus.IN_PROGRESS

    @property
    def is_terminal(self) -> bool:
        return self.status in (GenerationStatus.SUCCEEDED, GenerationStatus.FAILED)

    def mark_in_progress(self) -> None:
        self.status = GenerationStatus.IN_PROGRESS
        self.image_url = None
        self.error = None

    def mark_succeeded(self, image_url: str) -> None:
        self.status = GenerationStatus.SUCCEEDED
        self.image_url = image_url
        self.error = None

    def mark_failed(self, error: str) -> None:
        self.status = GenerationStatus.FAILED
        self.image_url = None
        self.error = error

    def reset(self) -> None:
        self.status = GenerationStatus.ABSENT
        self.image_url = None
        self.error = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "image_url": self.image_url,
            "error": self.error,
            "is_loading": self.is_loading,
        }


@dataclass
class CategoryStates:
    """
    One CategoryState per category, as explicit fields.

    The field names match Category values, so the record can be indexed by
    Category while the set of tracked categories stays fixed.
    """

    lifestyle: CategoryState = field(default_factory=CategoryState)
    product: CategoryState = field(default_factory=CategoryState)
    angled_product: CategoryState = field(default_factory=CategoryState)
    model: CategoryState = field(default_factory=CategoryState)
    gif: CategoryState = field(default_factory=CategoryState)
    story: CategoryState = field(default_factory=CategoryState)
    transparent_bg: CategoryState = field(default_factory=CategoryState)

    def __getitem__(self, category: Category) -> CategoryState:
        return getattr(self, Category(category).value)

    def items(self):
        return [(category, self[category]) for category in ALL_CATEGORIES]

    def reset(self) -> None:
        for f in fields(self):
            getattr(self, f.name).reset()

    def generated_images(self) -> Dict[Category, Optional[str]]:
        return {category: state.image_url for category, state in self.items()}

    def loading_states(self) -> Dict[Category, bool]:
        return {category: state.is_loading for category, state in self.items()}

    def error_states(self) -> Dict[Category, Optional[str]]:
        return {category: state.error for category, state in self.items()}

    @property
    def is_generating(self) -> bool:
        return any(state.is_loading for _, state in self.items())

    @property
    def has_generated_images(self) -> bool:
        return any(state.image_url is not None for _, state in self.items())

    @property
    def terminal_count(self) -> int:
        return sum(1 for _, state in self.items() if state.is_terminal)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {category.value: state.to_dict() for category, state in self.items()}


@dataclass(frozen=True)
class SourceImage:
    """The user's selected image and the media type detected at ingestion"""

    data: bytes = field(repr=False)
    filename: str
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class InlineImage:
    """Base64 image payload with an explicit media type, ready for a request"""

    mime_type: str
    data: str = field(repr=False)

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


@dataclass
class GenerationProgress:
    """Progress update pushed to web clients"""

    step: str
    message: str
    progress_percent: int
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "message": self.message,
            "progress_percent": self.progress_percent,
            "details": self.details,
        }
