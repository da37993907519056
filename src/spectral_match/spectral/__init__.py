"""
Spectral Module
===============

Frame sample to embedding vector.

This module provides:
    - SpectralTransform: 2-D cosine transform (complex or real coefficients)
    - extract_embedding: low-frequency sub-block, flattened row-major
"""

from spectral_match.spectral.transform import SpectralTransform
from spectral_match.spectral.embedding import extract_embedding

__all__ = [
    "SpectralTransform",
    "extract_embedding",
]
