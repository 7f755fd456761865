"""Prompt Spellbook - formula/tag/snippet prompt composer."""

__version__ = "1.0.0"
