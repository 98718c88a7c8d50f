"""Exceptions raised by the analysis pipeline."""
from typing import Optional


class AnalysisError(Exception):
    """Base class for failures that abort an analysis run."""


class DecodeFailure(AnalysisError):
    """The input bytes could not be decoded into pixels."""


class RenderingFailure(AnalysisError):
    """A module could not build its working raster or finish its computation."""

    def __init__(self, module: str, message: Optional[str] = None):
        self.module = module
        super().__init__(f"{module} analysis failed: {message or 'unknown error'}")
