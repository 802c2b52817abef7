"""
Data models for the Megapost generator
"""

from .schemas import (
    ALL_CATEGORIES,
    CATEGORY_TITLES,
    Category,
    CategoryState,
    CategoryStates,
    GenerationProgress,
    GenerationStatus,
    InlineImage,
    SourceImage,
)

__all__ = [
    'ALL_CATEGORIES',
    'CATEGORY_TITLES',
    'Category',
    'CategoryState',
    'CategoryStates',
    'GenerationProgress',
    'GenerationStatus',
    'InlineImage',
    'SourceImage',
]
