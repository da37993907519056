"""
spectral-match Configuration
============================

This module handles configuration loading for spectral-match.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    SPECTRAL_MATCH_DEVICE            -> camera.device
    SPECTRAL_MATCH_STORE_PATH        -> store.path
    SPECTRAL_MATCH_REPRESENTATION    -> transform.representation
    SPECTRAL_MATCH_PROJECTION_SCALAR -> projection.scalar
    SPECTRAL_MATCH_LOG_LEVEL         -> logging.level

Example:
    from spectral_match.config import get_settings

    settings = get_settings()
    print(settings.camera.device)
    print(settings.embedding_config().length)
"""

import os
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from spectral_match.errors import ConfigurationError
from spectral_match.models.embedding import EmbeddingConfig, Representation, ScalarKind


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class CameraConfig(BaseModel):
    """Camera source configuration."""

    device: str = Field(
        default="/dev/video0",
        description="Video device path or numeric index",
    )
    max_queue_size: int = Field(
        default=1,
        ge=1,
        description="Capacity of the frame hand-off channel",
    )
    read_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Maximum wait for the driver to deliver one frame",
    )


class TransformConfig(BaseModel):
    """Spectral transform configuration."""

    width: int = Field(default=24, ge=1, description="Luma sample width")
    height: int = Field(default=24, ge=1, description="Luma sample height")
    representation: Representation = Field(
        default=Representation.COMPLEX,
        description="Coefficient representation: 'complex' or 'real'",
    )


class EmbeddingSizeConfig(BaseModel):
    """Low-frequency sub-block kept as the embedding."""

    width: int = Field(default=8, ge=1, description="Embedding width")
    height: int = Field(default=8, ge=1, description="Embedding height")


class ProjectionConfig(BaseModel):
    """Incremental projection configuration."""

    scalar: ScalarKind = Field(
        default=ScalarKind.MAGNITUDE,
        description="Scalar projected per coefficient: 'magnitude', 'phase' or 'real'",
    )
    min_history: int = Field(
        default=2,
        ge=2,
        description="Project only when a label holds more vectors than this",
    )
    components: int = Field(
        default=2,
        ge=2,
        le=2,
        description="Number of principal components kept",
    )


class StoreConfig(BaseModel):
    """Point store configuration."""

    path: str = Field(default="points.json", description="Path to the point store")


class CaptureConfig(BaseModel):
    """Capture configuration for learn and picture modes."""

    frames: int = Field(default=32, ge=1, description="Frames grabbed in picture mode")
    warmup_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Delay before the learn frame is captured",
    )
    segmentation: bool = Field(
        default=False,
        description="Also write a background-removed animation",
    )
    output_path: str = Field(default="webcamera.gif", description="Camera animation path")
    segmented_path: str = Field(default="segmented.gif", description="Segmented animation path")
    frame_delay_ms: int = Field(default=0, ge=0, description="Delay between animation frames")


class SegmentationConfig(BaseModel):
    """Graph-based segmentation parameters for background removal."""

    sigma: float = Field(default=0.8, ge=0, description="Pre-smoothing Gaussian width")
    scale: float = Field(default=100.0, gt=0, description="Higher means larger segments")
    min_size: int = Field(default=20, ge=1, description="Minimum segment size in pixels")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for spectral-match.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    camera: CameraConfig = Field(default_factory=CameraConfig)
    transform: TransformConfig = Field(default_factory=TransformConfig)
    embedding: EmbeddingSizeConfig = Field(default_factory=EmbeddingSizeConfig)
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def _check_compatibility(self) -> "Settings":
        # Fail fast on embedding dimensions before any frame is processed
        if self.embedding.width > self.transform.width:
            raise ValueError(
                f"embedding.width {self.embedding.width} exceeds "
                f"transform.width {self.transform.width}"
            )
        if self.embedding.height > self.transform.height:
            raise ValueError(
                f"embedding.height {self.embedding.height} exceeds "
                f"transform.height {self.transform.height}"
            )

        representation = self.transform.representation
        scalar = self.projection.scalar
        if representation is Representation.REAL and scalar is not ScalarKind.REAL:
            raise ValueError(
                f"projection.scalar '{scalar.value}' needs complex coefficients; "
                f"use 'real' with the real representation"
            )
        if representation is Representation.COMPLEX and scalar is ScalarKind.REAL:
            raise ValueError(
                "projection.scalar 'real' is ambiguous for complex coefficients; "
                "use 'magnitude' or 'phase'"
            )
        return self

    def embedding_config(self) -> EmbeddingConfig:
        """Configuration tag for embeddings produced under these settings."""
        return EmbeddingConfig(
            transform_width=self.transform.width,
            transform_height=self.transform.height,
            embedding_width=self.embedding.width,
            embedding_height=self.embedding.height,
            representation=self.transform.representation,
        )


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration

    Raises:
        ConfigurationError: If the file cannot be read or is not valid YAML
        ValidationError: If the values are out of range or incompatible
    """
    # Find config file
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path.home() / ".config" / "spectral-match" / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        try:
            with open(config_path, "r") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed config file {config_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {config_path}: {e}")
        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Config file {config_path} must hold a mapping")
    else:
        logger.debug("No config file found, using defaults and environment variables")

    # Apply environment variable overrides
    _apply_env_overrides(config_data)

    # Build settings object
    settings = Settings.model_validate(config_data)

    return settings


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    if env_device := os.environ.get("SPECTRAL_MATCH_DEVICE"):
        config_data.setdefault("camera", {})["device"] = env_device

    if env_store := os.environ.get("SPECTRAL_MATCH_STORE_PATH"):
        config_data.setdefault("store", {})["path"] = env_store

    if env_repr := os.environ.get("SPECTRAL_MATCH_REPRESENTATION"):
        config_data.setdefault("transform", {})["representation"] = env_repr

    if env_scalar := os.environ.get("SPECTRAL_MATCH_PROJECTION_SCALAR"):
        config_data.setdefault("projection", {})["scalar"] = env_scalar

    if env_log := os.environ.get("SPECTRAL_MATCH_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Shared Settings Instance
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings from the default search locations, loaded on first use."""
    return load_config()
