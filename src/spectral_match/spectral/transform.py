"""
Spectral Transform
==================

2-D cosine transform of a luma sample.

Two interchangeable output modes:
    - real: orthonormal DCT-II computed by OpenCV (cv2.dct). One signed
      real coefficient per position, no phase.
    - complex: DCT-II evaluated through the FFT, keeping the complex
      spectrum so magnitude and phase can be read independently.

Complex mode, per axis of length N:
    v = (x[0], x[2], x[4], ..., x[5], x[3], x[1])
    X[k] = 2 * exp(-i*pi*k / 2N) * FFT(v)[k]

For a real input, Re(X) is the unnormalised DCT-II along that axis.
Rows are transformed first, then columns. Coefficient (0, 0) is the
DC term in both modes.

The transform is a pure function of its input. Shape validation is the
caller's job (see stream.luma.check_sample_shape).
"""

import logging

import cv2
import numpy as np

from spectral_match.errors import ConfigurationError
from spectral_match.models.embedding import Representation


logger = logging.getLogger(__name__)


def _complex_dct_axis(values: np.ndarray, axis: int) -> np.ndarray:
    """Complex DCT-II along one axis via the FFT."""
    n = values.shape[axis]
    order = np.concatenate([np.arange(0, n, 2), np.arange(1, n, 2)[::-1]])
    reordered = np.take(values, order, axis=axis)
    spectrum = np.fft.fft(reordered, axis=axis)

    shape = [1] * values.ndim
    shape[axis] = n
    twiddle = 2.0 * np.exp(-1j * np.pi * np.arange(n) / (2 * n)).reshape(shape)
    return spectrum * twiddle


class SpectralTransform:
    """
    Frame sample to spectral coefficients.

    Attributes:
        width: Expected sample width
        height: Expected sample height
        representation: Output mode

    Example:
        transform = SpectralTransform(24, 24, Representation.COMPLEX)
        coefficients = transform.transform(sample.luma)
        magnitude = np.abs(coefficients)
        phase = np.angle(coefficients)
    """

    def __init__(
        self,
        width: int = 24,
        height: int = 24,
        representation: Representation = Representation.COMPLEX,
    ) -> None:
        """
        Initialize the transform.

        Args:
            width: Sample width
            height: Sample height
            representation: complex or real coefficients

        Raises:
            ConfigurationError: If the real mode is asked for odd dimensions,
                which cv2.dct does not support
        """
        if width < 1 or height < 1:
            raise ConfigurationError(f"Transform size must be positive, got {width}x{height}")

        representation = Representation(representation)
        if representation is Representation.REAL and (width % 2 or height % 2):
            raise ConfigurationError(
                f"Real transform needs even dimensions, got {width}x{height}"
            )

        self.width = width
        self.height = height
        self.representation = representation

        logger.debug(
            f"SpectralTransform initialized: {width}x{height}, "
            f"representation={representation.value}"
        )

    def transform(self, luma: np.ndarray) -> np.ndarray:
        """
        Compute the spectral coefficients of a luma grid.

        Args:
            luma: (height, width) grid of luma intensities

        Returns:
            (height, width) coefficients, complex128 or float64
        """
        values = np.asarray(luma, dtype=np.float64)

        if self.representation is Representation.REAL:
            return cv2.dct(np.ascontiguousarray(values))

        rows = _complex_dct_axis(values, axis=1)
        return _complex_dct_axis(rows, axis=0)

    __call__ = transform
