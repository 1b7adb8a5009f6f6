"""Data models for decoded meter output."""

from .reading import Reading
