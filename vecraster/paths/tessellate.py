"""Tessellation of curves into stroke polygons and centerline polylines.

Segment count heuristic:
    N = ceil(sqrt(L² + 100) + 1), L = curve.approximate_length()

N grows roughly linearly with L and never drops below 11.

Stroke outline:
    N + 1 uniform samples t_k = k / N. At each sample the tangent is rotated
    by -90°, normalized and scaled to width / 2. The polygon is the left
    edge (pos - normal) walked forward followed by the right edge
    (pos + normal) walked backward, so it is closed and consistently wound.
    Samples whose tangent vanishes have no normal and are left out.
"""

import math

import numpy as np
import torch

from vecraster.utils import geometry


def segment_count(approx_length: float) -> int:
    """Number of straight segments used to approximate a curve."""
    return int(math.ceil(math.sqrt(approx_length * approx_length + 100.0) + 1.0))


def sample_parameters(n_segments: int) -> torch.Tensor:
    """N + 1 uniform parameters in [0, 1], float64."""
    return torch.linspace(0.0, 1.0, n_segments + 1, dtype=torch.float64)


def flatten(curve) -> np.ndarray:
    """Centerline polyline of a curve.

    Parameters
    ----------
    curve : Curve
        Any curve exposing approximate_length() and positions(t)

    Returns
    -------
    np.ndarray
        Vertices, shape (N + 1, 2); first and last equal the curve end points
    """
    t = sample_parameters(segment_count(curve.approximate_length()))
    return curve.positions(t).numpy()


def stroke_outline(curve, width: float) -> np.ndarray:
    """Closed polygon covering the stroke of a curve.

    Parameters
    ----------
    curve : Curve
        Any curve exposing approximate_length(), positions(t), tangents(t)
    width : float
        Stroke width in px, ≥ 0

    Returns
    -------
    np.ndarray
        Vertices, shape (2 * M, 2) with M ≤ N + 1 samples. Samples with a
        zero-length tangent (e.g. a control point on an end point) are
        dropped; if every tangent is zero all rows are NaN.
    """
    t = sample_parameters(segment_count(curve.approximate_length()))
    positions = curve.positions(t)  # (N+1, 2)
    normals = geometry.scaled_normals(curve.tangents(t), width / 2.0)

    finite = torch.isfinite(normals).all(dim=1)
    if finite.any() and not finite.all():
        positions = positions[finite]
        normals = normals[finite]

    forward = positions - normals
    backward = torch.flip(positions + normals, dims=[0])
    return torch.cat([forward, backward], dim=0).numpy()
