"""Geometric primitives and batched curve evaluation.

Provides:
    - Point2 / Vector2: immutable 2D position and direction types
    - Quadratic Bézier and line evaluation on torch tensors (batched over t)
    - First derivatives of the same curves
    - Scaled unit normals for stroke offsetting
    - Axis-aligned bounding box of a vertex array

Used by:
    - Curves: scalar position_at / tangent_at use Point2 / Vector2
    - Tessellator: batched sampling of N+1 parameters per curve
    - Canvas: bounding box of polygon vertices

All coordinates are in pixels, image frame (top-left origin, +Y down).

Zero-length vectors normalize to (NaN, NaN) instead of raising. Callers
avoid zero-length strokes; the canvas skips geometry whose bounding box is
not finite.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import torch


@dataclass(frozen=True)
class Vector2:
    """Direction / magnitude in 2D."""
    x: float
    y: float

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Vector2":
        return Vector2(-self.x, -self.y)

    def __mul__(self, k: float) -> "Vector2":
        return Vector2(self.x * k, self.y * k)

    __rmul__ = __mul__

    def __truediv__(self, k: float) -> "Vector2":
        return Vector2(self.x / k, self.y / k)

    def dot(self, other: "Vector2") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vector2") -> float:
        """Scalar z-component of the 3D cross product."""
        return self.x * other.y - other.x * self.y

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def unit(self) -> "Vector2":
        """Unit vector in the same direction; (NaN, NaN) for zero length."""
        n = self.length()
        if n == 0.0:
            return Vector2(math.nan, math.nan)
        return Vector2(self.x / n, self.y / n)

    def perpendicular(self) -> "Vector2":
        """Rotate by -90° in image frame: (x, y) → (y, -x)."""
        return Vector2(self.y, -self.x)


@dataclass(frozen=True)
class Point2:
    """Position in 2D."""
    x: float
    y: float

    def __add__(self, v: Vector2) -> "Point2":
        return Point2(self.x + v.x, self.y + v.y)

    def __sub__(self, other):
        # Point - Point → Vector, Point - Vector → Point
        if isinstance(other, Point2):
            return Vector2(self.x - other.x, self.y - other.y)
        return Point2(self.x - other.x, self.y - other.y)

    def distance(self, other: "Point2") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


def point_tensor(p: Point2, dtype: torch.dtype = torch.float64) -> torch.Tensor:
    """Point2 → tensor of shape (2,)."""
    return torch.tensor([p.x, p.y], dtype=dtype)


def line_eval(p0: torch.Tensor, p1: torch.Tensor, t: torch.Tensor) -> torch.Tensor:
    """Evaluate straight segment at parameters t.

    Parameters
    ----------
    p0, p1 : torch.Tensor
        End points, shape (2,)
    t : torch.Tensor
        Parameter values in [0, 1], shape (N,)

    Returns
    -------
    torch.Tensor
        Points on segment, shape (N, 2)
    """
    t = t.unsqueeze(-1)
    return (1.0 - t) * p0 + t * p1


def line_derivative(p0: torch.Tensor, p1: torch.Tensor, t: torch.Tensor) -> torch.Tensor:
    """Constant derivative p1 - p0, broadcast to shape (N, 2)."""
    return (p1 - p0).expand(t.shape[0], 2).clone()


def bezier_quadratic_eval(
    p0: torch.Tensor,
    p1: torch.Tensor,
    p2: torch.Tensor,
    t: torch.Tensor
) -> torch.Tensor:
    """Evaluate quadratic Bézier curve at parameters t.

    Parameters
    ----------
    p0, p1, p2 : torch.Tensor
        Start, control and end points, shape (2,)
    t : torch.Tensor
        Parameter values in [0, 1], shape (N,)

    Returns
    -------
    torch.Tensor
        Points on curve, shape (N, 2)

    Notes
    -----
    Bernstein form:
    B(t) = (1-t)²·p0 + 2(1-t)t·p1 + t²·p2
    """
    if t.ndim == 0:
        t = t.unsqueeze(0)
    t = t.unsqueeze(-1)  # (N, 1)
    one_minus_t = 1.0 - t

    b0 = one_minus_t ** 2
    b1 = 2.0 * one_minus_t * t
    b2 = t ** 2

    return b0 * p0 + b1 * p1 + b2 * p2


def bezier_quadratic_derivative(
    p0: torch.Tensor,
    p1: torch.Tensor,
    p2: torch.Tensor,
    t: torch.Tensor
) -> torch.Tensor:
    """First derivative of quadratic Bézier curve at parameters t.

    Parameters
    ----------
    p0, p1, p2 : torch.Tensor
        Start, control and end points, shape (2,)
    t : torch.Tensor
        Parameter values in [0, 1], shape (N,)

    Returns
    -------
    torch.Tensor
        Tangent vectors (not normalized), shape (N, 2)

    Notes
    -----
    B'(t) = 2(1-t)·(p1 - p0) + 2t·(p2 - p1)
    Each component uses only its own coordinate of the control points.
    """
    if t.ndim == 0:
        t = t.unsqueeze(0)
    t = t.unsqueeze(-1)
    return 2.0 * (1.0 - t) * (p1 - p0) + 2.0 * t * (p2 - p1)


def scaled_normals(tangents: torch.Tensor, half_width: float) -> torch.Tensor:
    """Rotate tangents by -90°, normalize and scale to half_width.

    Parameters
    ----------
    tangents : torch.Tensor
        Tangent vectors, shape (N, 2)
    half_width : float
        Offset distance from the centerline

    Returns
    -------
    torch.Tensor
        Offset vectors, shape (N, 2). Rows for zero-length tangents are NaN.
    """
    normals = torch.stack([tangents[:, 1], -tangents[:, 0]], dim=1)
    # 0/0 → NaN, same contract as Vector2.unit()
    lengths = torch.linalg.norm(normals, dim=1, keepdim=True)
    return normals / lengths * half_width


def vertices_bbox(points: np.ndarray) -> Tuple[float, float, float, float]:
    """Axis-aligned bounding box of a vertex array.

    Parameters
    ----------
    points : np.ndarray
        Vertices, shape (N, 2), N ≥ 1

    Returns
    -------
    Tuple[float, float, float, float]
        (xmin, ymin, xmax, ymax); NaN if any coordinate is NaN
    """
    if points.shape[0] == 0:
        raise ValueError("Bounding box of an empty vertex list is undefined")

    # np.min propagates NaN, which the canvas treats as degenerate
    xmin = float(points[:, 0].min())
    xmax = float(points[:, 0].max())
    ymin = float(points[:, 1].min())
    ymax = float(points[:, 1].max())

    return (xmin, ymin, xmax, ymax)
