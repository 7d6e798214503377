"""
Exceptions raised by skeleton extraction.

Inside the traversal failures are carried as values (see
``skelex.skeleton.extractor.ExtractionResult``); these exceptions are what
the raising entry points turn them into.
"""

from typing import Optional


class SkeletonExtractionError(Exception):
    """Base exception for skeleton extraction errors."""
    pass


class ConversionFailedError(SkeletonExtractionError):
    """A joint's local bind transform could not be represented."""

    def __init__(self, joint_name: str, reason: Optional[str] = None):
        self.joint_name = joint_name
        self.reason = reason
        message = f"Failed to extract skeleton transform for joint \"{joint_name}\""
        if reason:
            message += f": {reason}"
        super().__init__(message)


class NoSkeletonFoundError(SkeletonExtractionError):
    """No scene node was accepted as a joint."""

    def __init__(self, message: str = "No skeleton found in scene"):
        super().__init__(message)


class SkeletonValidationError(SkeletonExtractionError):
    """Extracted skeleton violates a structural limit."""
    pass


class ConfigError(SkeletonExtractionError):
    """Invalid import configuration."""
    pass
