"""
Error Taxonomy
==============

Exception hierarchy shared by every spectral-match component.

Kinds:
    - ConfigurationError: incompatible dimensions or representations,
      raised before any matching loop runs
    - StoreIOError: the persisted store cannot be read or written
    - StoreDecodeError: persisted data is corrupt or was built under a
      different embedding configuration
    - ProjectionError: the projection basis cannot be computed for a tick
    - CameraError: the camera cannot be opened or stops delivering frames

All of them derive from SpectralMatchError so the command line entry point
can report any failure of a run in one place.
"""


class SpectralMatchError(Exception):
    """Base class for all spectral-match failures."""
    pass


class ConfigurationError(SpectralMatchError):
    """Raised when components are wired with incompatible settings."""
    pass


class EmbeddingConfigError(ConfigurationError):
    """Raised when embedding dimensions or vector shapes do not agree."""
    pass


class SampleShapeError(ConfigurationError):
    """Raised when a frame sample does not match the transform size."""
    pass


class StoreIOError(SpectralMatchError):
    """Raised when the point store file cannot be opened or written."""
    pass


class StoreNotFoundError(StoreIOError):
    """Raised when a run requires an existing point store file."""
    pass


class StoreDecodeError(SpectralMatchError):
    """Raised when the point store file cannot be decoded."""
    pass


class StoreConfigMismatchError(StoreDecodeError):
    """Raised when a store was written under another embedding configuration."""
    pass


class ProjectionError(SpectralMatchError):
    """Raised when principal components cannot be computed."""
    pass


class CameraError(SpectralMatchError):
    """Raised when the camera cannot be opened or read."""
    pass
