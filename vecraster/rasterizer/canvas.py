"""Pixel-fill engine: coverage estimation and blending onto a ColorBuffer.

Architecture:
    - Bounding box of the shape, expanded by 1 px, clamped to the canvas
    - Membership predicate evaluated over the whole box with numpy
      (radial distance for annuli, even-odd crossing test for polygons)
    - Antialiasing off: pixels whose sample point is inside are overwritten
      with the draw color
    - Antialiasing on: 4 corner samples per pixel classify it as empty, full
      or mixed; mixed pixels are refined on a 16×16 subpixel grid and the
      coverage fraction scales the draw color's alpha before blending

Pixel (x, y) is sampled at the integer point (x, y). Corner offsets are
(0,0), (0.75,0), (0.75,0.75), (0,0.75); subpixel offsets are (i/16, j/16).

Invariants:
    - No buffer access outside [0, width) × [0, height); clamping happens
      here, errors raised by the buffer propagate unchanged
    - Draw calls are sequential; later calls composite over earlier ones
    - Pixels within one draw call are independent, so whole-box evaluation
      matches a per-pixel scan

Known limitation (kept): the 4-corner test can label a pixel empty or full
when a thin or sharp feature passes between the corner samples.

Radius bound: with antialiasing on, a filled circle's center pixel is fully
covered only when r >= 0.75·√2 ≈ 1.061 (the farthest corner sample). Smaller
disks still contain the center but blend it at fractional coverage. With
antialiasing off the center pixel is drawn for any r >= 0.

Usage:
    from vecraster.rasterizer.canvas import Canvas
    from vecraster.utils.color import Color

    canvas = Canvas(800, 600, Color(0.0, 0.0, 0.0, 1.0))
    canvas.set_draw_color(Color(1.0, 1.0, 1.0, 1.0))
    Line(Point2(100, 200), Point2(500, 300)).stroke(canvas, 10.0)
    data, stride = canvas.to_bytebuffer('RGBA', 8)
"""

import logging
import math
from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np

from vecraster.rasterizer.colorbuf import ColorBuffer
from vecraster.utils.color import GAMMA, Color, blend_over_array
from vecraster.utils.geometry import Point2, vertices_bbox

logger = logging.getLogger(__name__)

CORNER_OFFSETS = ((0.0, 0.0), (0.75, 0.0), (0.75, 0.75), (0.0, 0.75))
SUBPIXELS_PER_SIDE = 16

Predicate = Callable[[np.ndarray, np.ndarray], np.ndarray]
Vertices = Union[Sequence[Point2], np.ndarray]


class CanvasConsumedError(RuntimeError):
    """Canvas was exported with to_bytebuffer() and can no longer be used."""


def even_odd_rule(x, y, points: np.ndarray) -> np.ndarray:
    """Crossing-number containment test.

    Parameters
    ----------
    x, y : float or np.ndarray
        Query coordinates (broadcastable)
    points : np.ndarray
        Polygon vertices, shape (N, 2), implicitly closed

    Returns
    -------
    np.ndarray
        Boolean mask, True where the point is inside

    Notes
    -----
    A horizontal ray from the point to +x is intersected with every edge
    (i, i-1 mod N); each crossing toggles the result. Points exactly on an
    edge or vertex may land on either side.

    Samples are sorted by y once; each edge only visits the samples with
    min(yi, yj) <= y < max(yi, yj), the only ones it can toggle.
    """
    xb, yb = np.broadcast_arrays(
        np.asarray(x, dtype=np.float64),
        np.asarray(y, dtype=np.float64)
    )
    xf = xb.ravel()
    yf = yb.ravel()
    inside = np.zeros(xf.shape, dtype=bool)

    order = np.argsort(yf, kind='stable')
    y_sorted = yf[order]

    n = len(points)
    j = n - 1
    for i in range(n):
        xi, yi = points[i]
        xj, yj = points[j]
        j = i
        lo, hi = min(yi, yj), max(yi, yj)
        # Horizontal and NaN edges never straddle
        if not lo < hi:
            continue
        start = np.searchsorted(y_sorted, lo, side='left')
        stop = np.searchsorted(y_sorted, hi, side='left')
        if start == stop:
            continue
        idx = order[start:stop]
        x_cross = (xj - xi) * (yf[idx] - yi) / (yj - yi) + xi
        inside[idx] ^= xf[idx] < x_cross
    return inside.reshape(xb.shape)


def _as_vertices(points: Vertices) -> np.ndarray:
    if isinstance(points, np.ndarray):
        arr = points.astype(np.float64, copy=False)
    else:
        arr = np.array([(p.x, p.y) for p in points], dtype=np.float64)
    if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] != 2:
        raise ValueError(f"Polygon needs at least one (x, y) vertex, got shape {arr.shape}")
    return arr


class Canvas:
    """Raster surface with a current draw color and antialiasing switch.

    Attributes
    ----------
    draw_color : Color
        Color used by the next stroke/fill (initially the background)
    antialias_enabled : bool
        Subpixel coverage estimation on/off (initially on)
    gamma : float
        Blend exponent, fixed at 2.2

    Notes
    -----
    Antialiased circles need r >= 0.75·√2 for the center pixel to reach full
    coverage; below that it is blended with coverage < 1.
    """

    def __init__(self, width: int, height: int, background: Color):
        self._backing: Optional[ColorBuffer] = ColorBuffer(width, height, background)
        self.draw_color = background
        self.antialias_enabled = True
        self.gamma = GAMMA

        logger.info(f"Canvas initialized: {width}×{height} px, background={background.as_tuple()}")

    # ------------------------------------------------------------------
    # Configuration & access
    # ------------------------------------------------------------------

    def set_draw_color(self, color: Color) -> None:
        self.draw_color = color

    def enable_antialias(self, enable: bool) -> None:
        self.antialias_enabled = bool(enable)

    @property
    def buffer(self) -> ColorBuffer:
        if self._backing is None:
            raise CanvasConsumedError("Canvas was already exported to a byte buffer")
        return self._backing

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def get_pixel(self, x: int, y: int) -> Color:
        return self.buffer.get_pixel(x, y)

    def to_bytebuffer(self, format: str = 'RGBA', bit_depth: int = 8) -> Tuple[bytes, int]:
        """Serialize the surface and consume the canvas.

        Returns
        -------
        data : bytes
            Row-major pixel data
        stride : int
            Bytes per row

        Raises
        ------
        UnsupportedEncodingError
            If format/bit depth is not supported (canvas is left usable)
        CanvasConsumedError
            If the canvas was already exported
        """
        data, stride = self.buffer.serialize(format, bit_depth)
        self._backing = None
        logger.info(f"Canvas exported: {len(data)} bytes, stride={stride}")
        return data, stride

    # ------------------------------------------------------------------
    # Rasterization entry points
    # ------------------------------------------------------------------

    def rasterize_stroked_circle(self, center: Point2, inner_radius: float, outer_radius: float) -> None:
        """Fill the annulus inner_radius ≤ |p - center| ≤ outer_radius."""
        cx, cy = center.x, center.y
        bbox = (
            cx - outer_radius - 1.0, cy - outer_radius - 1.0,
            cx + outer_radius + 1.0, cy + outer_radius + 1.0,
        )

        def inside(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
            dist = np.hypot(xs - cx, ys - cy)
            return (dist >= inner_radius) & (dist <= outer_radius)

        logger.debug(f"Annulus at ({cx:.2f}, {cy:.2f}), r=[{inner_radius:.2f}, {outer_radius:.2f}]")
        self._rasterize(bbox, inside)

    def rasterize_filled_circle(self, center: Point2, radius: float) -> None:
        """Disk of the given radius (annulus with inner radius 0)."""
        self.rasterize_stroked_circle(center, 0.0, radius)

    def rasterize_convex_filled_polygon(self, points: Vertices) -> None:
        """Fill a simple polygon with the even-odd rule.

        Convexity is not required; any non-self-intersecting outline is
        filled correctly.
        """
        verts = _as_vertices(points)
        xmin, ymin, xmax, ymax = vertices_bbox(verts)
        bbox = (
            math.floor(xmin) - 1.0 if math.isfinite(xmin) else xmin,
            math.floor(ymin) - 1.0 if math.isfinite(ymin) else ymin,
            math.ceil(xmax) + 1.0 if math.isfinite(xmax) else xmax,
            math.ceil(ymax) + 1.0 if math.isfinite(ymax) else ymax,
        )

        def inside(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
            return even_odd_rule(xs, ys, verts)

        logger.debug(f"Polygon with {len(verts)} vertices, bbox={bbox}")
        self._rasterize(bbox, inside)

    def rasterize_filled_rectangle(self, p1: Point2, p2: Point2, p3: Point2, p4: Point2) -> None:
        self.rasterize_convex_filled_polygon([p1, p2, p3, p4])

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _clamp_bbox(
        self,
        bbox: Tuple[float, float, float, float]
    ) -> Optional[Tuple[int, int, int, int]]:
        """Round outwards and clamp to the canvas; None if nothing is left."""
        if not all(math.isfinite(v) for v in bbox):
            logger.warning(f"Degenerate geometry (non-finite bbox {bbox}), skipping")
            return None

        buf = self.buffer
        x_min = max(math.floor(bbox[0]), 0)
        y_min = max(math.floor(bbox[1]), 0)
        x_max = min(math.ceil(bbox[2]), buf.width - 1)
        y_max = min(math.ceil(bbox[3]), buf.height - 1)

        if x_max < x_min or y_max < y_min:
            return None
        return x_min, y_min, x_max, y_max

    def _rasterize(self, bbox: Tuple[float, float, float, float], inside: Predicate) -> None:
        """Evaluate coverage over the clamped bbox and write the result."""
        buf = self.buffer
        clamped = self._clamp_bbox(bbox)
        if clamped is None:
            return
        x_min, y_min, x_max, y_max = clamped

        # Sample grid, shape (rows, cols), indexed [y, x]
        ys, xs = np.meshgrid(
            np.arange(y_min, y_max + 1, dtype=np.float64),
            np.arange(x_min, x_max + 1, dtype=np.float64),
            indexing='ij'
        )

        region = buf.read_region(x_min, y_min, x_max + 1, y_max + 1)

        if not self.antialias_enabled:
            mask = inside(xs, ys)
            if not mask.any():
                return
            region[mask] = self.draw_color.as_tuple()
            buf.write_region(x_min, y_min, region)
            return

        coverage = self._coverage(xs, ys, inside)
        touched = coverage > 0.0
        if not touched.any():
            return

        region[touched] = blend_over_array(
            self.draw_color, region[touched], coverage[touched], self.gamma
        )
        buf.write_region(x_min, y_min, region)

        logger.debug(
            f"Blended {int(touched.sum())} px in [{x_min}, {x_max}]×[{y_min}, {y_max}] "
            f"({int((coverage == 1.0).sum())} full)"
        )

    def _coverage(self, xs: np.ndarray, ys: np.ndarray, inside: Predicate) -> np.ndarray:
        """Per-pixel coverage fraction via corner test + subpixel refinement.

        Returns
        -------
        np.ndarray
            Same shape as xs; 0 for empty, 1 for full, k/256 for mixed
        """
        corners = np.stack([inside(xs + ox, ys + oy) for ox, oy in CORNER_OFFSETS])
        any_in = corners.any(axis=0)
        all_in = corners.all(axis=0)

        coverage = np.zeros(xs.shape, dtype=np.float64)
        coverage[all_in] = 1.0

        mixed = any_in & ~all_in
        if mixed.any():
            n = SUBPIXELS_PER_SIDE
            steps = np.arange(n, dtype=np.float64) / n
            sub_y, sub_x = np.meshgrid(steps, steps, indexing='ij')
            # (K, 1) + (1, n*n) → (K, n*n)
            px = xs[mixed][:, np.newaxis] + sub_x.ravel()[np.newaxis, :]
            py = ys[mixed][:, np.newaxis] + sub_y.ravel()[np.newaxis, :]
            hits = inside(px, py).sum(axis=1)
            coverage[mixed] = hits / float(n * n)

        return coverage
