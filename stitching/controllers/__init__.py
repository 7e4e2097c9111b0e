"""
Controllers Package

High-level stitching coordinators.
"""

from stitching.controllers.stitching_engine import StitchingEngine

__all__ = [
    "StitchingEngine",
]
