"""
Matching Module
===============

Classification and diagnostic projection of query embeddings.

This module provides:
    - NearestNeighborClassifier: best label + distance over a point store
    - distance / coefficient_scalars: the comparison primitives
    - IncrementalProjector: 2-D coordinate of a query in its label's history
"""

from spectral_match.matching.classifier import (
    NearestNeighborClassifier,
    coefficient_scalars,
    distance,
)
from spectral_match.matching.projection import IncrementalProjector

__all__ = [
    "NearestNeighborClassifier",
    "coefficient_scalars",
    "distance",
    "IncrementalProjector",
]
