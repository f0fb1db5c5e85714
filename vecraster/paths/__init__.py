"""Drawable shapes and curve tessellation."""

from .curves import (
    Circle,
    ClosedMultiPath,
    Curve,
    Line,
    Loop,
    OpenMultiPath,
    Path,
    QuadBezierCurve,
)

__all__ = [
    'Circle',
    'ClosedMultiPath',
    'Curve',
    'Line',
    'Loop',
    'OpenMultiPath',
    'Path',
    'QuadBezierCurve',
]
