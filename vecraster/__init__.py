"""vecraster: software rasterizer for 2D vector shapes.

Draws lines, quadratic Béziers and circles (stroked or filled) onto an
in-memory RGBA surface with optional antialiasing and gamma-encoded
blending, then exports the pixels as a byte buffer.

Architecture layers (strict one-way dependency):
    scripts/ → vecraster/scene → vecraster/paths → vecraster/rasterizer → vecraster/utils/

Key invariants:
    - Image frame: pixel (x, y) is column x, row y, origin top-left
    - Colors are RGBA floats in [0, 1]; blending uses γ = 2.2
    - No draw call ever touches memory outside the canvas
    - YAML-only configs, no JSON
"""

__version__ = "0.3.0"
