"""
Nearest-Neighbor Classifier
===========================

Scores a query embedding against every stored vector.

Distance between a stored vector p and a query q of length n:

    distance(p, q) = sum_i (scalar(p_i) - scalar(q_i)) ** 2

where scalar() is the raw value for real coefficients and the magnitude
for complex coefficients (phase does not take part in matching).

Scan order is labels in insertion order, then vectors in the order they
were learned. Only a strictly smaller distance replaces the current best,
so ties go to the first vector encountered.
"""

import logging
from typing import Optional

import numpy as np

from spectral_match.errors import EmbeddingConfigError
from spectral_match.models.embedding import Match, ScalarKind
from spectral_match.store.point_store import LabeledPoints


logger = logging.getLogger(__name__)


def coefficient_scalars(vector: np.ndarray, kind: ScalarKind) -> np.ndarray:
    """
    Per-coefficient real scalars of an embedding vector.

    Args:
        vector: Embedding vector (real or complex)
        kind: real (raw value), magnitude or phase

    Returns:
        float64 array of the same length
    """
    kind = ScalarKind(kind)
    if kind is ScalarKind.MAGNITUDE:
        return np.abs(vector).astype(np.float64)
    if kind is ScalarKind.PHASE:
        if not np.iscomplexobj(vector):
            raise EmbeddingConfigError("Phase is only defined for complex coefficients")
        return np.angle(vector).astype(np.float64)
    if np.iscomplexobj(vector):
        raise EmbeddingConfigError("Raw real scalars need real coefficients")
    return np.asarray(vector, dtype=np.float64)


def distance(p: np.ndarray, q: np.ndarray, kind: ScalarKind) -> float:
    """
    Summed squared difference of the per-coefficient scalars.

    Raises:
        EmbeddingConfigError: If the vectors differ in length
    """
    if p.shape != q.shape:
        raise EmbeddingConfigError(
            f"Cannot compare vectors of shapes {p.shape} and {q.shape}"
        )
    diff = coefficient_scalars(p, kind) - coefficient_scalars(q, kind)
    return float(np.dot(diff, diff))


class NearestNeighborClassifier:
    """
    Exhaustive nearest-neighbor search over a LabeledPoints store.

    Cost is O(total stored vectors x embedding length) per query.

    Example:
        classifier = NearestNeighborClassifier(points)
        match = classifier.classify(vector)
        if match is None:
            print("no match")
    """

    def __init__(self, points: LabeledPoints) -> None:
        self.points = points
        self.scalar = points.config.distance_scalar

    def classify(self, query: np.ndarray) -> Optional[Match]:
        """
        Find the stored vector closest to the query.

        Args:
            query: Embedding vector built under the store's configuration

        Returns:
            Match with the owning label and distance, or None if the
            store holds no vectors

        Raises:
            EmbeddingConfigError: If the query does not fit the store's
                configuration (checked before scanning)
        """
        query = self.points.check_vector(query)
        query_scalars = coefficient_scalars(query, self.scalar)

        best: Optional[Match] = None
        for entry in self.points:
            for point in entry.points:
                diff = coefficient_scalars(point, self.scalar) - query_scalars
                score = float(np.dot(diff, diff))
                if best is None or score < best.distance:
                    best = Match(label=entry.name, distance=score)

        if best is None:
            logger.debug("Classification against an empty store: no match")
        return best
