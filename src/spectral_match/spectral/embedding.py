"""
Embedding Extraction
====================

Low-frequency corner of the coefficient grid as a flat feature vector.

The embedding is coefficients[0:eh, 0:ew] scanned row by row (row 0 left
to right, then row 1, ...). Every comparison in the system relies on this
order, so it must never change for an existing point store.
"""

import numpy as np

from spectral_match.errors import EmbeddingConfigError


def extract_embedding(
    coefficients: np.ndarray,
    embedding_width: int,
    embedding_height: int,
) -> np.ndarray:
    """
    Flatten the top-left embedding_height x embedding_width sub-block.

    Args:
        coefficients: (H, W) spectral coefficients
        embedding_width: Columns to keep (<= W)
        embedding_height: Rows to keep (<= H)

    Returns:
        1-D array of length embedding_width * embedding_height,
        same dtype as the coefficients

    Raises:
        EmbeddingConfigError: If the sub-block does not fit the grid
    """
    if coefficients.ndim != 2:
        raise EmbeddingConfigError(
            f"Coefficients must be a 2D grid, got shape {coefficients.shape}"
        )

    height, width = coefficients.shape
    if not 1 <= embedding_width <= width or not 1 <= embedding_height <= height:
        raise EmbeddingConfigError(
            f"Embedding {embedding_width}x{embedding_height} does not fit "
            f"coefficient grid {width}x{height}"
        )

    block = coefficients[:embedding_height, :embedding_width]
    return np.array(block, copy=True).reshape(-1)
