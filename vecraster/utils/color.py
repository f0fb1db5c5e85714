"""RGBA color values and gamma-encoded alpha compositing.

Provides:
    - Color: RGBA float tuple with component-wise arithmetic
    - blend_over: Porter-Duff "over" for a single pixel, channels mixed in
      gamma-encoded space (γ = 2.2)
    - blend_over_array: same model over numpy arrays (H, W, 4)
    - quantize: float [0,1] → unsigned integer codes for serialization

Used by:
    - Canvas: antialiased coverage blending
    - ColorBuffer: background fill and byte-buffer export

Blending model (src = draw color, f = coverage fraction, dst = current pixel):
    a_s   = src.a * f
    out.a = a_s + dst.a * (1 - a_s)
    out.c = (src.c^γ * a_s + dst.c^γ * (1 - a_s)) ^ (1/γ)

Channels are mixed on the gamma-encoded values, not in linear light.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

GAMMA = 2.2


@dataclass(frozen=True)
class Color:
    """RGBA color, components conceptually in [0, 1] (not enforced)."""
    r: float
    g: float
    b: float
    a: float = 1.0

    def __add__(self, other: "Color") -> "Color":
        return Color(self.r + other.r, self.g + other.g, self.b + other.b, self.a + other.a)

    def __sub__(self, other: "Color") -> "Color":
        return Color(self.r - other.r, self.g - other.g, self.b - other.b, self.a - other.a)

    def __mul__(self, k: float) -> "Color":
        return Color(self.r * k, self.g * k, self.b * k, self.a * k)

    __rmul__ = __mul__

    def with_alpha(self, a: float) -> "Color":
        return Color(self.r, self.g, self.b, a)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)


def blend_over(src: Color, dst: Color, coverage: float = 1.0, gamma: float = GAMMA) -> Color:
    """Composite src over dst for one pixel.

    Parameters
    ----------
    src : Color
        Draw color
    dst : Color
        Current pixel color
    coverage : float
        Fraction of the pixel covered by the shape, in (0, 1]
    gamma : float
        Encoding exponent, default 2.2

    Returns
    -------
    Color
        Blended color
    """
    a_s = src.a * coverage
    inv = 1.0 - a_s

    def mix(s: float, d: float) -> float:
        return (s ** gamma * a_s + d ** gamma * inv) ** (1.0 / gamma)

    return Color(
        mix(src.r, dst.r),
        mix(src.g, dst.g),
        mix(src.b, dst.b),
        a_s + dst.a * inv,
    )


def blend_over_array(
    src: Color,
    dst: np.ndarray,
    coverage: np.ndarray,
    gamma: float = GAMMA
) -> np.ndarray:
    """Composite src over a block of pixels.

    Parameters
    ----------
    src : Color
        Draw color
    dst : np.ndarray
        Current pixels, shape (..., 4), RGBA
    coverage : np.ndarray
        Coverage fractions, shape (...), values in (0, 1]
    gamma : float
        Encoding exponent, default 2.2

    Returns
    -------
    np.ndarray
        Blended pixels, shape (..., 4), float64

    Notes
    -----
    Element-wise identical to blend_over(); used by the vectorized
    rasterizer.
    """
    dst = dst.astype(np.float64)
    a_s = (src.a * coverage)[..., np.newaxis]  # (..., 1)
    inv = 1.0 - a_s

    src_rgb = np.array([src.r, src.g, src.b], dtype=np.float64)
    out = np.empty_like(dst)
    out[..., :3] = np.power(
        np.power(src_rgb, gamma) * a_s + np.power(dst[..., :3], gamma) * inv,
        1.0 / gamma
    )
    out[..., 3] = (a_s + dst[..., 3:4] * inv)[..., 0]
    return out


def quantize(values: np.ndarray, bit_depth: int) -> np.ndarray:
    """Map float [0,1] values to unsigned integer codes.

    Parameters
    ----------
    values : np.ndarray
        Float values, any shape; clipped to [0, 1]
    bit_depth : int
        8 or 16

    Returns
    -------
    np.ndarray
        uint8 for 8-bit, big-endian uint16 for 16-bit
    """
    max_code = (1 << bit_depth) - 1
    codes = np.rint(np.clip(values, 0.0, 1.0) * max_code)
    if bit_depth == 8:
        return codes.astype(np.uint8)
    if bit_depth == 16:
        return codes.astype('>u2')
    raise ValueError(f"Cannot quantize to {bit_depth}-bit, expected 8 or 16")
