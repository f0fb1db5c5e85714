"""Pixel storage and the coverage/blending engine.

Modules:
    - colorbuf: ColorBuffer (bounds-checked RGBA grid, byte-buffer export)
    - canvas: Canvas (circle, annulus and polygon rasterization)
"""

from .canvas import Canvas, CanvasConsumedError
from .colorbuf import ColorBuffer, OutOfBoundsError, UnsupportedEncodingError

__all__ = [
    'Canvas',
    'CanvasConsumedError',
    'ColorBuffer',
    'OutOfBoundsError',
    'UnsupportedEncodingError',
]
