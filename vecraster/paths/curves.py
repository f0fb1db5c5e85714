"""Drawable shapes: lines, quadratic Béziers, circles and multi-part paths.

Capabilities:
    - Path:  stroke(canvas, width)
    - Curve: Path + approximate_length(), position_at(t), tangent_at(t)
             (plus batched positions(t) / tangents(t) on torch tensors)
    - Loop:  Path + fill(canvas)

Shapes compute an outline (rectangle, tessellated polygon or annulus radii)
and hand it to the canvas, which does all pixel work.

approximate_length() is an upper bound used only to size tessellation; for
a quadratic Bézier it is the control-polygon length, never the true arc
length.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np
import torch

from vecraster.paths import tessellate
from vecraster.rasterizer.canvas import Canvas
from vecraster.utils import geometry
from vecraster.utils.geometry import Point2, Vector2

logger = logging.getLogger(__name__)


def _check_width(width: float) -> None:
    if width < 0:
        raise ValueError(f"Stroke width must be >= 0, got {width}")


class Path(ABC):
    """Anything that can be stroked onto a canvas."""

    @abstractmethod
    def stroke(self, canvas: Canvas, width: float) -> None:
        ...


class Loop(Path):
    """Closed shape that can also be filled."""

    @abstractmethod
    def fill(self, canvas: Canvas) -> None:
        ...


class Curve(Path):
    """Open shape defined by a parametric function on t ∈ [0, 1]."""

    @abstractmethod
    def approximate_length(self) -> float:
        ...

    @abstractmethod
    def position_at(self, t: float) -> Point2:
        ...

    @abstractmethod
    def tangent_at(self, t: float) -> Vector2:
        ...

    @abstractmethod
    def positions(self, t: torch.Tensor) -> torch.Tensor:
        """Batched position_at, shape (N,) → (N, 2)."""

    @abstractmethod
    def tangents(self, t: torch.Tensor) -> torch.Tensor:
        """Batched tangent_at, shape (N,) → (N, 2)."""

    @property
    @abstractmethod
    def start(self) -> Point2:
        ...

    @property
    @abstractmethod
    def end(self) -> Point2:
        ...


class Line(Curve):
    """Straight segment p0 → p1."""

    def __init__(self, p0: Point2, p1: Point2):
        self.p0 = p0
        self.p1 = p1

    def __repr__(self) -> str:
        return f"Line({self.p0}, {self.p1})"

    @property
    def start(self) -> Point2:
        return self.p0

    @property
    def end(self) -> Point2:
        return self.p1

    def approximate_length(self) -> float:
        return self.p0.distance(self.p1)

    def position_at(self, t: float) -> Point2:
        return Point2(
            (1.0 - t) * self.p0.x + t * self.p1.x,
            (1.0 - t) * self.p0.y + t * self.p1.y,
        )

    def tangent_at(self, t: float) -> Vector2:
        return self.p1 - self.p0

    def positions(self, t: torch.Tensor) -> torch.Tensor:
        return geometry.line_eval(geometry.point_tensor(self.p0), geometry.point_tensor(self.p1), t)

    def tangents(self, t: torch.Tensor) -> torch.Tensor:
        return geometry.line_derivative(geometry.point_tensor(self.p0), geometry.point_tensor(self.p1), t)

    def stroke(self, canvas: Canvas, width: float) -> None:
        """Rasterize the rectangle of the given width centered on the segment."""
        _check_width(width)
        n = (self.p1 - self.p0).perpendicular().unit() * (width / 2.0)
        canvas.rasterize_filled_rectangle(
            self.p0 - n,
            self.p1 - n,
            self.p1 + n,
            self.p0 + n,
        )


class QuadBezierCurve(Curve):
    """Quadratic Bézier curve begin → end pulled towards control."""

    def __init__(self, begin: Point2, control: Point2, end: Point2):
        self.p0 = begin
        self.p1 = control
        self.p2 = end

    def __repr__(self) -> str:
        return f"QuadBezierCurve({self.p0}, {self.p1}, {self.p2})"

    @property
    def start(self) -> Point2:
        return self.p0

    @property
    def end(self) -> Point2:
        return self.p2

    def approximate_length(self) -> float:
        """Control-polygon length |p1 - p0| + |p2 - p1| (upper bound)."""
        return self.p0.distance(self.p1) + self.p1.distance(self.p2)

    def position_at(self, t: float) -> Point2:
        u = 1.0 - t
        return Point2(
            u * u * self.p0.x + 2.0 * t * u * self.p1.x + t * t * self.p2.x,
            u * u * self.p0.y + 2.0 * t * u * self.p1.y + t * t * self.p2.y,
        )

    def tangent_at(self, t: float) -> Vector2:
        u = 1.0 - t
        return Vector2(
            2.0 * u * (self.p1.x - self.p0.x) + 2.0 * t * (self.p2.x - self.p1.x),
            2.0 * u * (self.p1.y - self.p0.y) + 2.0 * t * (self.p2.y - self.p1.y),
        )

    def _controls(self):
        return (
            geometry.point_tensor(self.p0),
            geometry.point_tensor(self.p1),
            geometry.point_tensor(self.p2),
        )

    def positions(self, t: torch.Tensor) -> torch.Tensor:
        return geometry.bezier_quadratic_eval(*self._controls(), t)

    def tangents(self, t: torch.Tensor) -> torch.Tensor:
        return geometry.bezier_quadratic_derivative(*self._controls(), t)

    def stroke(self, canvas: Canvas, width: float) -> None:
        """Tessellate into one closed outline and fill it (even-odd)."""
        _check_width(width)
        outline = tessellate.stroke_outline(self, width)
        logger.debug(f"{self!r}: {len(outline) // 2 - 1} segments")
        canvas.rasterize_convex_filled_polygon(outline)


class Circle(Loop):
    """Circle with a center and a non-negative radius."""

    def __init__(self, center: Point2, radius: float):
        if radius < 0:
            raise ValueError(f"Circle radius must be >= 0, got {radius}")
        self.center = center
        self.radius = float(radius)

    def __repr__(self) -> str:
        return f"Circle({self.center}, {self.radius})"

    def stroke(self, canvas: Canvas, width: float) -> None:
        """Annulus between radius - width/2 and radius + width/2."""
        _check_width(width)
        half = width / 2.0
        canvas.rasterize_stroked_circle(self.center, self.radius - half, self.radius + half)

    def fill(self, canvas: Canvas) -> None:
        canvas.rasterize_filled_circle(self.center, self.radius)


class OpenMultiPath(Path):
    """Ordered sequence of curves stroked one after another."""

    def __init__(self, parts: Sequence[Curve]):
        if len(parts) == 0:
            raise ValueError("Multi-part path needs at least one curve")
        self.parts: List[Curve] = list(parts)

    def __len__(self) -> int:
        return len(self.parts)

    def stroke(self, canvas: Canvas, width: float) -> None:
        _check_width(width)
        for part in self.parts:
            part.stroke(canvas, width)


class ClosedMultiPath(OpenMultiPath, Loop):
    """Sequence of curves forming a closed outline.

    The last part is implicitly joined back to the first when filling.
    """

    def outline(self) -> np.ndarray:
        """Concatenated centerlines, shared joint points kept once."""
        chunks = []
        for i, part in enumerate(self.parts):
            pts = tessellate.flatten(part)
            if i > 0 and part.start == self.parts[i - 1].end:
                pts = pts[1:]
            chunks.append(pts)
        return np.concatenate(chunks, axis=0)

    def fill(self, canvas: Canvas) -> None:
        canvas.rasterize_convex_filled_polygon(self.outline())
