"""Test scene.v1 validation, scene rendering and the render CLI.

Tests for vecraster.utils.validators / vecraster.scene / scripts/render_scene.py:
    - The shipped basic1 demo scene validates
    - Per-shape parameter rules (point counts, radius, fill only for circles)
    - Field bounds (color range, positive canvas size, non-negative width)
    - Loader errors carry the file path
    - render_scene draws ops in order, honors antialias overrides
    - CLI writes PNG (+ metadata) and raw byte dumps

Run:
    pytest tests/test_scene.py -v
"""

import importlib.util
import sys
from pathlib import Path

import numpy as np
import pytest
import yaml
from PIL import Image

from vecraster.paths.curves import Circle, Line, QuadBezierCurve
from vecraster.scene import build_shape, render_scene
from vecraster.utils import fs
from vecraster.utils.color import Color
from vecraster.utils.validators import DrawOp, SceneV1, load_scene_config

REPO_ROOT = Path(__file__).resolve().parent.parent
BASIC1 = REPO_ROOT / "configs" / "scenes" / "basic1.yaml"

WHITE = {'r': 1.0, 'g': 1.0, 'b': 1.0, 'a': 1.0}


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def small_scene_dict():
    """40×30 black canvas with a filled disk and a line, hard edges."""
    return {
        'schema': 'scene.v1',
        'name': 'small',
        'canvas': {
            'width': 40,
            'height': 30,
            'background': {'r': 0.0, 'g': 0.0, 'b': 0.0, 'a': 1.0},
            'antialias': False,
        },
        'ops': [
            {'shape': 'circle', 'points': [[10, 10]], 'radius': 4.0, 'mode': 'fill', 'color': WHITE},
            {'shape': 'line', 'points': [[0, 25], [39, 25]], 'width': 2.0,
             'color': {'r': 1.0, 'g': 0.0, 'b': 0.0}},
        ],
    }


@pytest.fixture
def small_scene_file(tmp_path, small_scene_dict):
    path = tmp_path / "small.yaml"
    fs.atomic_yaml_dump(small_scene_dict, path)
    return path


def _write(tmp_path, data, name="scene.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


# ============================================================================
# TEST SUITE 1: Validation
# ============================================================================

def test_basic1_validates():
    scene = load_scene_config(BASIC1)

    assert scene.name == 'basic1'
    assert (scene.canvas.width, scene.canvas.height) == (800, 600)
    assert [op.shape for op in scene.ops] == ['line', 'quad_bezier', 'circle', 'circle']
    assert [op.mode for op in scene.ops] == ['stroke', 'stroke', 'stroke', 'fill']
    assert scene.ops[2].radius == 10.0
    assert scene.ops[2].width == 5.0


def test_defaults(small_scene_dict):
    del small_scene_dict['schema']
    del small_scene_dict['canvas']['background']
    scene = SceneV1(**small_scene_dict)

    assert scene.schema_version == 'scene.v1'
    assert scene.canvas.background.a == 1.0
    assert scene.ops[1].color.a == 1.0
    assert scene.ops[1].antialias is None


@pytest.mark.parametrize("op,match", [
    ({'shape': 'line', 'points': [[0, 0]], 'color': WHITE}, "needs 2 point"),
    ({'shape': 'quad_bezier', 'points': [[0, 0], [1, 1]], 'color': WHITE}, "needs 3 point"),
    ({'shape': 'circle', 'points': [[0, 0]], 'color': WHITE}, "requires a radius"),
    ({'shape': 'line', 'points': [[0, 0], [1, 1]], 'radius': 2.0, 'color': WHITE}, "does not take a radius"),
    ({'shape': 'line', 'points': [[0, 0], [1, 1]], 'mode': 'fill', 'color': WHITE}, "cannot be filled"),
    ({'shape': 'circle', 'points': [[0, 0]], 'radius': -1.0, 'color': WHITE}, "radius"),
    ({'shape': 'line', 'points': [[0, 0], [1, 1]], 'width': -2.0, 'color': WHITE}, "width"),
    ({'shape': 'spline', 'points': [[0, 0]], 'color': WHITE}, "shape"),
    ({'shape': 'line', 'points': [[0, 0], [1, 1]], 'color': {'r': 1.5, 'g': 0, 'b': 0}}, "less than or equal"),
])
def test_invalid_ops(op, match):
    with pytest.raises(ValueError, match=match):
        DrawOp(**op)


def test_invalid_canvas(tmp_path, small_scene_dict):
    small_scene_dict['canvas']['width'] = 0
    path = _write(tmp_path, small_scene_dict)
    with pytest.raises(ValueError, match="validation failed at .*scene.yaml"):
        load_scene_config(path)


def test_wrong_schema(tmp_path, small_scene_dict):
    small_scene_dict['schema'] = 'scene.v2'
    path = _write(tmp_path, small_scene_dict)
    with pytest.raises(ValueError, match="Expected schema 'scene.v1'"):
        load_scene_config(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="Scene file not found"):
        load_scene_config(tmp_path / "missing.yaml")


def test_non_mapping_file(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must contain a mapping"):
        load_scene_config(path)


# ============================================================================
# TEST SUITE 2: Rendering
# ============================================================================

def test_build_shape():
    assert isinstance(build_shape(DrawOp(shape='line', points=[(0, 0), (1, 1)], color=WHITE)), Line)
    assert isinstance(
        build_shape(DrawOp(shape='quad_bezier', points=[(0, 0), (1, 1), (2, 0)], color=WHITE)),
        QuadBezierCurve
    )
    circle = build_shape(DrawOp(shape='circle', points=[(3, 4)], radius=2.0, color=WHITE))
    assert isinstance(circle, Circle)
    assert circle.radius == 2.0


def test_render_scene(small_scene_file):
    canvas = render_scene(load_scene_config(small_scene_file))

    assert (canvas.width, canvas.height) == (40, 30)
    assert canvas.antialias_enabled is False
    assert canvas.get_pixel(10, 10) == Color(1.0, 1.0, 1.0, 1.0)
    assert canvas.get_pixel(20, 25) == Color(1.0, 0.0, 0.0, 1.0)
    assert canvas.get_pixel(30, 5) == Color(0.0, 0.0, 0.0, 1.0)


def test_render_scene_antialias_overrides(small_scene_dict):
    small_scene_dict['canvas']['antialias'] = True
    small_scene_dict['ops'][0]['antialias'] = False

    canvas = render_scene(SceneV1(**small_scene_dict))
    # Last op inherits the canvas setting
    assert canvas.antialias_enabled is True
    # Disk edges stay hard
    disk = canvas.buffer.read_region(4, 4, 17, 17)[..., 0]
    assert set(np.unique(disk).tolist()) <= {0.0, 1.0}

    canvas = render_scene(SceneV1(**small_scene_dict), antialias=False)
    assert canvas.antialias_enabled is False


def test_render_empty_scene(small_scene_dict):
    small_scene_dict['ops'] = []
    canvas = render_scene(SceneV1(**small_scene_dict))
    assert np.all(canvas.buffer.pixels[..., :3] == 0.0)


# ============================================================================
# TEST SUITE 3: CLI
# ============================================================================

@pytest.fixture
def cli(monkeypatch, restore_logging):
    """Load scripts/render_scene.py and return a runner for its main()."""
    spec = importlib.util.spec_from_file_location(
        "render_scene_cli", REPO_ROOT / "scripts" / "render_scene.py"
    )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # main() installs an excepthook; restore it afterwards
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)

    def run(*argv):
        monkeypatch.setattr(sys, "argv", ["render_scene.py", *argv])
        return module.main()

    return run


def test_cli_png(cli, small_scene_file, tmp_path):
    out = tmp_path / "out" / "small.png"
    assert cli("--scene", str(small_scene_file), "--output", str(out), "--metadata") == 0

    with Image.open(out) as img:
        assert img.size == (40, 30)
        assert img.mode == "RGBA"
        assert img.getpixel((10, 10)) == (255, 255, 255, 255)
        assert img.getpixel((20, 25)) == (255, 0, 0, 255)

    meta = fs.load_yaml(out.with_suffix('.yaml'))
    assert meta['scene'] == 'small'
    assert meta['stride'] == 40 * 4
    assert meta['ops'] == 2


def test_cli_raw(cli, small_scene_file, tmp_path):
    out = tmp_path / "small.raw"
    rc = cli("--scene", str(small_scene_file), "--output", str(out),
             "--raw", "--format", "BGRA", "--bit-depth", "16")
    assert rc == 0

    data = out.read_bytes()
    stride = 40 * 8
    assert len(data) == 30 * stride
    # Red line pixel in BGRA 16-bit: B=0, G=0, R=0xFFFF, A=0xFFFF
    offset = 25 * stride + 20 * 8
    assert data[offset:offset + 8] == bytes([0, 0, 0, 0, 0xFF, 0xFF, 0xFF, 0xFF])


def test_cli_bad_scene(cli, tmp_path):
    assert cli("--scene", str(tmp_path / "none.yaml"), "--output", str(tmp_path / "x.png")) == 1
