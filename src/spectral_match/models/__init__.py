"""
Data Models
===========

Typed models shared across the spectral-match pipeline.

Models:
    - Representation: complex (phase retained) or real coefficients
    - ScalarKind: per-coefficient scalar (real, magnitude, phase)
    - EmbeddingConfig: configuration tag stored with every point store
    - Match: nearest-neighbor result
    - ProjectionPoint: 2-D diagnostic coordinate
"""

from spectral_match.models.embedding import (
    EmbeddingConfig,
    Match,
    ProjectionPoint,
    Representation,
    ScalarKind,
)

__all__ = [
    "EmbeddingConfig",
    "Match",
    "ProjectionPoint",
    "Representation",
    "ScalarKind",
]
