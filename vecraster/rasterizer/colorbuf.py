"""Addressable RGBA pixel storage with byte-buffer export.

The buffer is a (H, W, 4) float32 numpy array indexed [y, x]. Every access
is bounds-checked; negative coordinates are out of bounds (no Python-style
wraparound).

Supported serialization:
    - formats: RGBA, BGRA, ARGB, ABGR (channel order of each pixel)
    - bit depths: 8 (uint8), 16 (big-endian uint16, PNG byte order)

Rows are written top to bottom; stride is the byte length of one row.
"""

import logging
from typing import Tuple

import numpy as np

from vecraster.utils.color import Color, quantize

logger = logging.getLogger(__name__)

# Channel indices into the internal RGBA layout
CHANNEL_ORDERS = {
    'RGBA': (0, 1, 2, 3),
    'BGRA': (2, 1, 0, 3),
    'ARGB': (3, 0, 1, 2),
    'ABGR': (3, 2, 1, 0),
}

BIT_DEPTHS = (8, 16)


class OutOfBoundsError(IndexError):
    """Pixel access outside the buffer extents."""


class UnsupportedEncodingError(ValueError):
    """Requested pixel format or bit depth is not implemented."""


class ColorBuffer:
    """Width × height grid of RGBA colors.

    Attributes
    ----------
    width : int
        Number of columns
    height : int
        Number of rows
    pixels : np.ndarray
        Backing store, shape (height, width, 4), float32
    """

    def __init__(self, width: int, height: int, background: Color):
        if width <= 0 or height <= 0:
            raise ValueError(f"Buffer dimensions must be positive, got {width}×{height}")
        self._width = int(width)
        self._height = int(height)
        self.pixels = np.empty((self._height, self._width, 4), dtype=np.float32)
        self.pixels[...] = background.as_tuple()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise OutOfBoundsError(
                f"Pixel ({x}, {y}) outside buffer {self._width}×{self._height}"
            )

    def get_pixel(self, x: int, y: int) -> Color:
        self._check(x, y)
        r, g, b, a = (float(v) for v in self.pixels[y, x])
        return Color(r, g, b, a)

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        self._check(x, y)
        self.pixels[y, x] = color.as_tuple()

    def read_region(self, x0: int, y0: int, x1: int, y1: int) -> np.ndarray:
        """Copy of pixels in [x0, x1) × [y0, y1), shape (y1-y0, x1-x0, 4)."""
        self._check_region(x0, y0, x1, y1)
        return self.pixels[y0:y1, x0:x1].copy()

    def write_region(self, x0: int, y0: int, values: np.ndarray) -> None:
        """Store a block of pixels with top-left corner (x0, y0)."""
        h, w = values.shape[:2]
        self._check_region(x0, y0, x0 + w, y0 + h)
        self.pixels[y0:y0 + h, x0:x0 + w] = values

    def _check_region(self, x0: int, y0: int, x1: int, y1: int) -> None:
        if x1 < x0 or y1 < y0:
            raise ValueError(f"Inverted region ({x0}, {y0})-({x1}, {y1})")
        if x1 == x0 or y1 == y0:
            return
        # Both corners of a non-empty region must be addressable
        self._check(x0, y0)
        self._check(x1 - 1, y1 - 1)

    def serialize(self, format: str = 'RGBA', bit_depth: int = 8) -> Tuple[bytes, int]:
        """Export pixels as a flat byte buffer.

        Parameters
        ----------
        format : str
            Channel order, one of RGBA, BGRA, ARGB, ABGR
        bit_depth : int
            Bits per channel, 8 or 16

        Returns
        -------
        data : bytes
            Row-major pixel data, length height * stride
        stride : int
            Bytes per row

        Raises
        ------
        UnsupportedEncodingError
            If format or bit_depth is not supported
        """
        order = CHANNEL_ORDERS.get(str(format).upper())
        if order is None:
            raise UnsupportedEncodingError(
                f"Unsupported pixel format {format!r}, expected one of {sorted(CHANNEL_ORDERS)}"
            )
        if bit_depth not in BIT_DEPTHS:
            raise UnsupportedEncodingError(
                f"Unsupported bit depth {bit_depth}, expected one of {BIT_DEPTHS}"
            )

        codes = quantize(self.pixels[..., list(order)], bit_depth)
        stride = self._width * 4 * (bit_depth // 8)

        logger.debug(
            f"Serialized {self._width}×{self._height} buffer as {format} "
            f"{bit_depth}-bit, stride={stride}"
        )
        return codes.tobytes(), stride
