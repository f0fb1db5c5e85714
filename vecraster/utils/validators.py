"""YAML schema validation for scene files.

Provides pydantic models for the scene schema (scene.v1):
    - Canvas: size in px, background color, antialiasing switch
    - Draw ops: shape (line / quad_bezier / circle), stroke or fill, width,
      draw color

Validation happens before anything is drawn; errors name the offending op
index and field.

Units:
    - Geometry: pixels, image frame (top-left origin, +Y down)
    - Color: RGBA in [0.0, 1.0]

Usage:
    from vecraster.utils import validators

    scene = validators.load_scene_config("configs/scenes/basic1.yaml")
    for op in scene.ops:
        ...
"""

from pathlib import Path
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Control points required per shape
POINT_COUNTS = {
    'line': 2,
    'quad_bezier': 3,
    'circle': 1,
}


class ColorRGBA(BaseModel):
    """RGBA color (0.0-1.0)."""
    r: float = Field(..., ge=0.0, le=1.0, description="Red component")
    g: float = Field(..., ge=0.0, le=1.0, description="Green component")
    b: float = Field(..., ge=0.0, le=1.0, description="Blue component")
    a: float = Field(1.0, ge=0.0, le=1.0, description="Alpha (opacity)")


class CanvasConfig(BaseModel):
    """Raster surface settings, fixed for the whole scene."""
    width: int = Field(..., gt=0, le=16384, description="Width in px")
    height: int = Field(..., gt=0, le=16384, description="Height in px")
    background: ColorRGBA = Field(
        default_factory=lambda: ColorRGBA(r=0.0, g=0.0, b=0.0, a=1.0),
        description="Initial color of every pixel"
    )
    antialias: bool = Field(True, description="Subpixel coverage estimation")


class DrawOp(BaseModel):
    """Single stroke or fill of one shape."""
    shape: Literal['line', 'quad_bezier', 'circle']
    mode: Literal['stroke', 'fill'] = 'stroke'
    points: List[Tuple[float, float]] = Field(..., description="Control points (x, y) in px")
    radius: Optional[float] = Field(None, ge=0.0, description="Circle radius in px")
    width: float = Field(1.0, ge=0.0, description="Stroke width in px")
    color: ColorRGBA
    antialias: Optional[bool] = Field(None, description="Per-op override of canvas.antialias")

    @model_validator(mode='after')
    def validate_shape_params(self) -> 'DrawOp':
        expected = POINT_COUNTS[self.shape]
        if len(self.points) != expected:
            raise ValueError(
                f"Shape '{self.shape}' needs {expected} point(s), got {len(self.points)}"
            )
        if self.shape == 'circle' and self.radius is None:
            raise ValueError("Shape 'circle' requires a radius")
        if self.shape != 'circle' and self.radius is not None:
            raise ValueError(f"Shape '{self.shape}' does not take a radius")
        if self.mode == 'fill' and self.shape != 'circle':
            raise ValueError(f"Shape '{self.shape}' is open and cannot be filled")
        return self


class SceneV1(BaseModel):
    """Complete scene: canvas plus ordered draw operations."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field("scene.v1", alias="schema", description="Schema version")
    name: str = Field("scene", description="Used for output file names and log context")
    canvas: CanvasConfig
    ops: List[DrawOp] = Field(default_factory=list, description="Draw order = list order")

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "scene.v1":
            raise ValueError(f"Expected schema 'scene.v1', got '{v}'")
        return v


# ============================================================================
# PUBLIC API
# ============================================================================

def load_scene_config(path: Union[str, Path]) -> SceneV1:
    """Load and validate a scene from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to scene.v1 YAML file

    Returns
    -------
    SceneV1
        Validated scene

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (message includes the path and failing fields)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scene file not found: {path}")

    data = fs.load_yaml(path)
    if not isinstance(data, dict):
        raise ValueError(f"Scene file {path} must contain a mapping, got {type(data).__name__}")
    try:
        return SceneV1(**data)
    except Exception as e:
        raise ValueError(f"Scene validation failed at {path}: {e}") from e
