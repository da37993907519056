"""
Embedding Models
================

Typed descriptions of how an embedding is produced and what matching returns.

EmbeddingConfig is the configuration tag carried by every point store.
Two embeddings are comparable only when they were built under equal tags.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Representation(str, Enum):
    """Coefficient representation produced by the spectral transform."""

    COMPLEX = "complex"
    REAL = "real"


class ScalarKind(str, Enum):
    """Per-coefficient scalar used for distances and projections."""

    REAL = "real"
    MAGNITUDE = "magnitude"
    PHASE = "phase"


class EmbeddingConfig(BaseModel):
    """
    Transform and embedding dimensions plus the coefficient representation.

    Attributes:
        transform_width: Width of the luma sample and coefficient grid
        transform_height: Height of the luma sample and coefficient grid
        embedding_width: Columns kept from the low-frequency corner
        embedding_height: Rows kept from the low-frequency corner
        representation: complex (phase retained) or real
    """

    model_config = ConfigDict(frozen=True)

    transform_width: int = Field(default=24, ge=1, description="Transform width")
    transform_height: int = Field(default=24, ge=1, description="Transform height")
    embedding_width: int = Field(default=8, ge=1, description="Embedding width")
    embedding_height: int = Field(default=8, ge=1, description="Embedding height")
    representation: Representation = Field(
        default=Representation.COMPLEX,
        description="Coefficient representation: 'complex' or 'real'",
    )

    @model_validator(mode="after")
    def _embedding_fits_transform(self) -> "EmbeddingConfig":
        if self.embedding_width > self.transform_width:
            raise ValueError(
                f"embedding_width {self.embedding_width} exceeds "
                f"transform_width {self.transform_width}"
            )
        if self.embedding_height > self.transform_height:
            raise ValueError(
                f"embedding_height {self.embedding_height} exceeds "
                f"transform_height {self.transform_height}"
            )
        return self

    @property
    def length(self) -> int:
        """Number of coefficients in one embedding vector."""
        return self.embedding_width * self.embedding_height

    @property
    def dtype(self) -> np.dtype:
        """numpy dtype of embedding vectors under this configuration."""
        if self.representation is Representation.COMPLEX:
            return np.dtype(np.complex128)
        return np.dtype(np.float64)

    @property
    def distance_scalar(self) -> ScalarKind:
        """Scalar compared by the nearest-neighbor classifier."""
        if self.representation is Representation.COMPLEX:
            return ScalarKind.MAGNITUDE
        return ScalarKind.REAL


@dataclass(frozen=True, slots=True)
class Match:
    """
    Winning label of a nearest-neighbor scan.

    Attributes:
        label: Label owning the closest stored vector
        distance: Summed squared scalar difference to that vector
    """

    label: str
    distance: float

    def __str__(self) -> str:
        return f"{self.label} {self.distance:f}"


@dataclass(frozen=True, slots=True)
class ProjectionPoint:
    """
    2-D coordinate of a query within its label's principal-component basis.

    Attributes:
        x: Coordinate on the first principal component
        y: Coordinate on the second principal component
        history_size: Number of stored vectors the basis was built from
    """

    x: float
    y: float
    history_size: int

    def __str__(self) -> str:
        return f"{self.x:f} {self.y:f}"

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "x": round(self.x, 6),
            "y": round(self.y, 6),
            "history_size": self.history_size,
        }
