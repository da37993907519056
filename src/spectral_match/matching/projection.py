"""
Incremental Projection
======================

2-D diagnostic coordinate for a matched query.

Given the winning label's history (m vectors) and the query (row m), this
builds an (m+1) x n matrix of per-coefficient scalars, finds its top two
principal components and reports where the query lands on them.

Algorithm:
    1. Scalars per coefficient (magnitude, phase or raw real values)
    2. Principal axes from the SVD of the mean-centred matrix
    3. Sign of each axis fixed so its largest loading is positive
    4. Rows projected onto the axes as given (not centred)
    5. Last row returned

The basis is rebuilt from scratch on every call and discarded afterwards.
"""

import logging
from typing import Sequence

import numpy as np

from spectral_match.errors import ProjectionError
from spectral_match.matching.classifier import coefficient_scalars
from spectral_match.models.embedding import ProjectionPoint, ScalarKind


logger = logging.getLogger(__name__)


class IncrementalProjector:
    """
    Projects a query and its label's history onto two principal components.

    Attributes:
        scalar: Per-coefficient scalar used to build the matrix
        components: Number of principal components (fixed at 2)

    Example:
        projector = IncrementalProjector(ScalarKind.MAGNITUDE)
        point = projector.project(entry.points, query)
        print(point.x, point.y)
    """

    MIN_HISTORY = 3

    def __init__(self, scalar: ScalarKind = ScalarKind.MAGNITUDE, components: int = 2) -> None:
        if components != 2:
            raise ValueError("Only 2-D projections are supported")
        self.scalar = ScalarKind(scalar)
        self.components = components

    def principal_axes(self, data: np.ndarray) -> np.ndarray:
        """
        Top principal axes of a data matrix.

        Args:
            data: (rows, n) real matrix

        Returns:
            (n, components) basis with deterministic signs

        Raises:
            ProjectionError: If the decomposition fails or the data does
                not span enough directions
        """
        if not np.all(np.isfinite(data)):
            raise ProjectionError("Projection data contains non-finite values")

        centred = data - data.mean(axis=0)
        try:
            _, singular, vt = np.linalg.svd(centred, full_matrices=False)
        except np.linalg.LinAlgError as e:
            raise ProjectionError(f"Principal components failed: {e}")

        tolerance = singular.max(initial=0.0) * max(centred.shape) * np.finfo(np.float64).eps
        rank = int(np.sum(singular > tolerance))
        if rank < self.components:
            raise ProjectionError(
                f"Degenerate projection basis: rank {rank} < {self.components}"
            )

        basis = vt[: self.components].T.copy()
        for k in range(self.components):
            axis = basis[:, k]
            if axis[np.argmax(np.abs(axis))] < 0:
                basis[:, k] = -axis
        return basis

    def project(self, history: Sequence[np.ndarray], query: np.ndarray) -> ProjectionPoint:
        """
        Coordinates of the query in the basis of history + query.

        Args:
            history: The label's stored vectors, oldest first
            query: Current query vector

        Returns:
            ProjectionPoint for the query row

        Raises:
            ProjectionError: If history is too short or the basis is degenerate
        """
        if len(history) < self.MIN_HISTORY:
            raise ProjectionError(
                f"Projection needs at least {self.MIN_HISTORY} stored vectors, "
                f"got {len(history)}"
            )

        rows = [coefficient_scalars(vector, self.scalar) for vector in history]
        rows.append(coefficient_scalars(query, self.scalar))
        try:
            data = np.vstack(rows)
        except ValueError as e:
            raise ProjectionError(f"Vectors of unequal length: {e}")

        basis = self.principal_axes(data)
        projected = data @ basis

        x, y = projected[-1]
        return ProjectionPoint(x=float(x), y=float(y), history_size=len(history))
