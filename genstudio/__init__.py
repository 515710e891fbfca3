"""Prompt-driven image generation and editing studio."""

__version__ = "0.1.0"
