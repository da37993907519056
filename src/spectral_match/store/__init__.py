"""
Store Module
============

Persistent mapping from label to embedding history.

Example:
    from spectral_match.store import LabeledPoints, load_points, save_points

    points = load_points("points.json", config) or LabeledPoints(config)
    points.learn("alice", vector)
    save_points("points.json", points)
"""

from spectral_match.store.point_store import (
    LabeledPoints,
    PointEntry,
    decode_points,
    encode_points,
    learn,
    load_points,
    save_points,
)

__all__ = [
    "LabeledPoints",
    "PointEntry",
    "decode_points",
    "encode_points",
    "learn",
    "load_points",
    "save_points",
]
