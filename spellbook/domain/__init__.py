"""Domain entities."""
from .formula import Formula
from .model import Model
from .tag import Tag
from .snippet import Snippet
from .app_settings import AppSettings, SETTINGS_KEY
from .segment import Segment, TextSegment, TagSegment

__all__ = [
    "Formula",
    "Model",
    "Tag",
    "Snippet",
    "AppSettings",
    "SETTINGS_KEY",
    "Segment",
    "TextSegment",
    "TagSegment",
]
