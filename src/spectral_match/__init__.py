"""
spectral-match
==============

Spectral fingerprints of camera frames, learned under labels and matched
by nearest-neighbor distance.

Each frame's luma is reduced to a small grid, transformed with a 2-D cosine
transform, and the low-frequency corner of the coefficients becomes the
frame's embedding. Embeddings are stored per label in a persistent point
store, and new frames are classified against it.

Components:
    - stream: camera feed, frame buffer, luma sampling
    - spectral: cosine transform and embedding extraction
    - store: labeled point store with JSON persistence
    - matching: nearest-neighbor classifier and 2-D projection
    - capture: GIF animations with optional background removal

Example:
    from spectral_match.config import get_settings
    from spectral_match.pipeline import infer
    from spectral_match.stream import OpenCVCamera

    settings = get_settings()
    asyncio.run(infer(settings, OpenCVCamera(settings.camera.device)))
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
