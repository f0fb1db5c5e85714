"""Scene rendering: validated scene.v1 config → shapes → Canvas.

Each DrawOp becomes one shape and one stroke/fill call, in list order, so
later ops composite over earlier ones.
"""

import logging
from typing import Union

from vecraster.paths.curves import Circle, Line, Path, QuadBezierCurve
from vecraster.rasterizer.canvas import Canvas
from vecraster.utils.color import Color
from vecraster.utils.geometry import Point2
from vecraster.utils.logging_config import pop_context, push_context
from vecraster.utils.validators import ColorRGBA, DrawOp, SceneV1

logger = logging.getLogger(__name__)


def to_color(c: ColorRGBA) -> Color:
    return Color(c.r, c.g, c.b, c.a)


def build_shape(op: DrawOp) -> Path:
    """Instantiate the shape described by a draw op."""
    pts = [Point2(x, y) for x, y in op.points]
    if op.shape == 'line':
        return Line(*pts)
    if op.shape == 'quad_bezier':
        return QuadBezierCurve(*pts)
    if op.shape == 'circle':
        return Circle(pts[0], op.radius)
    raise ValueError(f"Unknown shape: {op.shape}")


def render_scene(scene: SceneV1, antialias: Union[bool, None] = None) -> Canvas:
    """Draw every op of a scene onto a fresh canvas.

    Parameters
    ----------
    scene : SceneV1
        Validated scene
    antialias : bool, optional
        Overrides canvas.antialias for the whole scene (per-op overrides
        still win)

    Returns
    -------
    Canvas
        Canvas holding the rendered scene (not yet exported)
    """
    cfg = scene.canvas
    canvas = Canvas(cfg.width, cfg.height, to_color(cfg.background))
    default_aa = cfg.antialias if antialias is None else antialias

    push_context(scene=scene.name)
    try:
        for i, op in enumerate(scene.ops):
            push_context(op=i)
            shape = build_shape(op)
            canvas.set_draw_color(to_color(op.color))
            canvas.enable_antialias(default_aa if op.antialias is None else op.antialias)

            if op.mode == 'fill':
                shape.fill(canvas)
            else:
                shape.stroke(canvas, op.width)
            logger.debug(f"{op.mode} {shape!r}")
    finally:
        pop_context(keys=['scene', 'op'])

    logger.info(f"Rendered {len(scene.ops)} op(s) for scene '{scene.name}'")
    return canvas
