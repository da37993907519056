"""
Point Store
===========

Labeled embedding history with JSON persistence.

This module provides:
    - PointEntry: one label and its append-only vector history
    - LabeledPoints: the in-memory store, tagged with its EmbeddingConfig
    - load_points / save_points: whole-file persistence
    - learn: append a vector under a label

File Format:
    {
        "format": "spectral-match.points",
        "version": 1,
        "embedding": {EmbeddingConfig},
        "labels": {
            "<label>": {"name": "<label>", "points": [[...], ...]}
        }
    }

    Real vectors are lists of floats. Complex vectors are lists of
    [real, imag] pairs. Label order is insertion order.

Design Rules:
    - A missing file is not an error; load_points returns None
    - A file written under another EmbeddingConfig is rejected, never mixed
    - Saving rewrites the whole file (temp file + replace)
    - The store is owned by one run at a time; there is no locking
"""

import contextlib
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Literal, Optional, Union

import numpy as np
from pydantic import BaseModel, Field, ValidationError

from spectral_match.errors import (
    EmbeddingConfigError,
    StoreConfigMismatchError,
    StoreDecodeError,
    StoreIOError,
)
from spectral_match.models.embedding import EmbeddingConfig, Representation


logger = logging.getLogger(__name__)


FORMAT_NAME = "spectral-match.points"
FORMAT_VERSION = 1


# =============================================================================
# In-memory Store
# =============================================================================

@dataclass
class PointEntry:
    """
    History of embedding vectors learned for one label.

    Attributes:
        name: Label name
        points: Vectors in the order they were learned
    """

    name: str
    points: List[np.ndarray] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def __repr__(self) -> str:
        return f"PointEntry(name={self.name!r}, points={len(self.points)})"


class LabeledPoints:
    """
    Mapping from label to PointEntry, tagged with its embedding configuration.

    Every vector held by the store has the tag's length and dtype.
    Labels keep their insertion order, which is also the scan order
    used by the classifier.

    Example:
        points = LabeledPoints(config)
        points.learn("alice", vector)
        entry = points.get("alice")
    """

    def __init__(
        self,
        config: EmbeddingConfig,
        entries: Optional[Dict[str, PointEntry]] = None,
    ) -> None:
        self._config = config
        self._entries: Dict[str, PointEntry] = {}
        for label, entry in (entries or {}).items():
            for vector in entry.points:
                self.learn(label, vector)

    @property
    def config(self) -> EmbeddingConfig:
        """Embedding configuration every stored vector was built under."""
        return self._config

    @property
    def labels(self) -> List[str]:
        """Labels in insertion order."""
        return list(self._entries)

    @property
    def total_vectors(self) -> int:
        """Number of vectors across all labels."""
        return sum(len(entry) for entry in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, label: object) -> bool:
        return label in self._entries

    def __iter__(self) -> Iterator[PointEntry]:
        return iter(self._entries.values())

    def __repr__(self) -> str:
        return (
            f"LabeledPoints(labels={len(self._entries)}, "
            f"vectors={self.total_vectors}, "
            f"representation={self._config.representation.value})"
        )

    def get(self, label: str) -> Optional[PointEntry]:
        """Entry for a label, or None if it was never learned."""
        return self._entries.get(label)

    def check_vector(self, vector: np.ndarray) -> np.ndarray:
        """
        Validate a vector against the store's configuration.

        Args:
            vector: Candidate embedding vector

        Returns:
            The vector as a 1-D array of the configured dtype

        Raises:
            EmbeddingConfigError: On wrong shape, length or representation
        """
        array = np.asarray(vector)
        if array.ndim != 1:
            raise EmbeddingConfigError(f"Vector must be 1D, got shape {array.shape}")
        if array.shape[0] != self._config.length:
            raise EmbeddingConfigError(
                f"Vector length {array.shape[0]} does not match "
                f"embedding length {self._config.length}"
            )

        is_complex = np.iscomplexobj(array)
        if self._config.representation is Representation.COMPLEX and not is_complex:
            raise EmbeddingConfigError("Store holds complex vectors, got a real vector")
        if self._config.representation is Representation.REAL and is_complex:
            raise EmbeddingConfigError("Store holds real vectors, got a complex vector")

        return array.astype(self._config.dtype, copy=False)

    def learn(self, label: str, vector: np.ndarray) -> PointEntry:
        """
        Append a vector under a label, creating the entry if absent.

        No deduplication and no cap on history length.

        Args:
            label: Non-empty label name
            vector: Embedding vector matching the store's configuration

        Returns:
            The updated entry
        """
        if not label:
            raise ValueError("label must be a non-empty string")

        array = np.array(self.check_vector(vector), copy=True)

        entry = self._entries.get(label)
        if entry is None:
            entry = PointEntry(name=label)
            self._entries[label] = entry
        entry.points.append(array)
        return entry


def learn(points: LabeledPoints, label: str, vector: np.ndarray) -> PointEntry:
    """Append a vector to a store under a label. See LabeledPoints.learn."""
    return points.learn(label, vector)


# =============================================================================
# Wire Format
# =============================================================================

class StoredEntry(BaseModel):
    """One label as written to disk."""

    name: str = Field(..., min_length=1)
    points: List[List[Union[float, List[float]]]] = Field(default_factory=list)


class StoreDocument(BaseModel):
    """Top-level point store document."""

    format: Literal["spectral-match.points"] = FORMAT_NAME
    version: Literal[1] = FORMAT_VERSION
    embedding: EmbeddingConfig
    labels: Dict[str, StoredEntry] = Field(default_factory=dict)


def _encode_vector(vector: np.ndarray) -> list:
    if np.iscomplexobj(vector):
        return np.column_stack([vector.real, vector.imag]).tolist()
    return vector.tolist()


def _decode_vector(raw: list, config: EmbeddingConfig, label: str) -> np.ndarray:
    try:
        array = np.asarray(raw, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise StoreDecodeError(f"Malformed vector under label {label!r}: {e}")

    if config.representation is Representation.COMPLEX:
        if array.ndim != 2 or array.shape[1] != 2:
            raise StoreDecodeError(
                f"Complex vector under label {label!r} must be [real, imag] pairs"
            )
        array = array[:, 0] + 1j * array[:, 1]
    elif array.ndim != 1:
        raise StoreDecodeError(f"Real vector under label {label!r} must be flat")

    if array.shape[0] != config.length:
        raise StoreDecodeError(
            f"Vector under label {label!r} has length {array.shape[0]}, "
            f"expected {config.length}"
        )
    return array


def encode_points(points: LabeledPoints) -> str:
    """Serialize a store to its JSON document."""
    document = StoreDocument(
        embedding=points.config,
        labels={
            entry.name: StoredEntry(
                name=entry.name,
                points=[_encode_vector(vector) for vector in entry.points],
            )
            for entry in points
        },
    )
    return document.model_dump_json()


def decode_points(text: str, config: EmbeddingConfig) -> LabeledPoints:
    """
    Parse a JSON document into a store.

    Raises:
        StoreDecodeError: If the document is corrupt
        StoreConfigMismatchError: If it was written under another configuration
    """
    try:
        document = StoreDocument.model_validate_json(text)
    except ValidationError as e:
        raise StoreDecodeError(f"Invalid point store document: {e}")

    if document.embedding != config:
        raise StoreConfigMismatchError(
            f"Point store was built with {document.embedding.model_dump(mode='json')}, "
            f"current configuration is {config.model_dump(mode='json')}"
        )

    points = LabeledPoints(config)
    for label, stored in document.labels.items():
        if stored.name != label:
            raise StoreDecodeError(f"Entry name {stored.name!r} does not match key {label!r}")
        for raw in stored.points:
            points.learn(label, _decode_vector(raw, config, label))
    return points


# =============================================================================
# Persistence
# =============================================================================

def load_points(
    path: Union[str, Path],
    config: EmbeddingConfig,
) -> Optional[LabeledPoints]:
    """
    Load a persisted store.

    Args:
        path: Store file path
        config: Configuration the caller will embed queries with

    Returns:
        The store, or None if the file does not exist

    Raises:
        StoreIOError: If the file exists but cannot be read
        StoreDecodeError: If the contents are corrupt or incompatible
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        logger.info(f"No point store at {path}")
        return None
    except UnicodeDecodeError as e:
        raise StoreDecodeError(f"Point store {path} is not valid UTF-8: {e}")
    except OSError as e:
        raise StoreIOError(f"Cannot read point store {path}: {e}")

    points = decode_points(text, config)
    logger.info(
        f"Loaded point store {path}: {len(points)} labels, "
        f"{points.total_vectors} vectors"
    )
    return points


def save_points(path: Union[str, Path], points: LabeledPoints) -> None:
    """
    Write the whole store to disk, replacing any existing file.

    Raises:
        StoreIOError: If the file cannot be written
    """
    path = Path(path)
    text = encode_points(points)
    tmp_path = path.with_name(path.name + ".tmp")

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        with contextlib.suppress(OSError):
            tmp_path.unlink(missing_ok=True)
        raise StoreIOError(f"Cannot write point store {path}: {e}")

    logger.info(
        f"Saved point store {path}: {len(points)} labels, "
        f"{points.total_vectors} vectors"
    )
