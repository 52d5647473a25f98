"""
Data container models for railway-oriented smoothing pipelines.

This module provides Pydantic-based data models that are propagated through railway
functions in functional pipelines. Image mutations receive and return these
containers, so they can be chained with `returns.pipeline.pipe`.
"""

from .image import GrayImage


__all__ = ["GrayImage"]
