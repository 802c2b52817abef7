"""
Megapost Services

This package contains service modules for the Megapost generator:
- errors: Error types
- prompt_builder: Per-category prompts
- image_converter: Media type detection and base64 encoding
- gemini_generator: Gemini image generation
- orchestrator: Per-category generation state
- image_fetcher: Source image ingestion from files and URLs
- downloads: Download filenames and export
- utils: Shared file helpers
"""

__all__ = [
    'errors',
    'prompt_builder',
    'image_converter',
    'gemini_generator',
    'orchestrator',
    'image_fetcher',
    'downloads',
    'utils',
]
