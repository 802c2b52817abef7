"""
Megapost - AI marketing images from a single product photo
"""

__version__ = "0.1.0"
