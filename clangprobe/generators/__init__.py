"""
Generators for the build artifacts emitted by a probe run.
"""

from .artifacts import ArtifactWriter

__all__ = ["ArtifactWriter"]
