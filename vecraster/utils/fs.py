"""Filesystem helpers: atomic writes, image output and YAML handling.

Provides:
    - Atomic writes: tmp file → fsync → rename (no partially written files)
    - PNG/other image output of serialized canvases via Pillow
    - YAML load/dump (PyYAML safe_load / safe_dump)
    - Directory creation with exist_ok semantics

All paths use pathlib.Path.

Usage:
    from vecraster.utils import fs
    fs.atomic_save_image(rgba_u8, out_dir / "scene.png")
    fs.atomic_yaml_dump(metadata, out_dir / "scene.yaml")
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import yaml
from PIL import Image


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create directory (and parents) if missing, return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(
    path: Union[str, Path],
    data: bytes,
    tmp_suffix: str = ".tmp"
) -> None:
    """Write bytes to file atomically (tmp → fsync → rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path
    data : bytes
        Data to write
    tmp_suffix : str
        Temporary file suffix, default ".tmp"

    Notes
    -----
    The tmp file lives in the target directory so the rename stays on one
    filesystem.
    """
    path = Path(path)
    ensure_dir(path.parent)
    tmp_path = path.with_suffix(path.suffix + tmp_suffix)

    try:
        with open(tmp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def atomic_save_image(
    img: np.ndarray,
    path: Union[str, Path],
    pil_kwargs: Optional[Dict[str, Any]] = None
) -> None:
    """Save an 8-bit image atomically.

    Parameters
    ----------
    img : np.ndarray
        (H, W, 4) RGBA, (H, W, 3) RGB or (H, W) gray; uint8, or float [0,1]
    path : Union[str, Path]
        Target file path (extension determines format)
    pil_kwargs : Optional[Dict[str, Any]]
        Extra kwargs for PIL.Image.save (e.g., optimize=True)
    """
    path = Path(path)
    pil_kwargs = pil_kwargs or {}

    if img.dtype != np.uint8:
        img = np.rint(np.clip(img, 0.0, 1.0) * 255).astype(np.uint8)

    pil_img = Image.fromarray(img)

    ensure_dir(path.parent)
    # Keep the real extension last so PIL can infer the format
    tmp_path = path.with_name(path.stem + ".tmp" + path.suffix)
    try:
        pil_img.save(tmp_path, **pil_kwargs)
        tmp_path.replace(path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to save image {path} atomically: {e}") from e


def rgba_bytes_to_array(data: bytes, width: int, height: int, stride: int) -> np.ndarray:
    """View an 8-bit RGBA byte buffer as an (H, W, 4) uint8 array.

    Parameters
    ----------
    data : bytes
        Row-major pixel data as returned by Canvas.to_bytebuffer('RGBA', 8)
    width, height : int
        Image dimensions in pixels
    stride : int
        Bytes per row (≥ 4 * width)
    """
    if stride < width * 4 or len(data) < stride * height:
        raise ValueError(
            f"Buffer of {len(data)} bytes with stride {stride} too small for {width}×{height} RGBA"
        )
    rows = np.frombuffer(data, dtype=np.uint8, count=stride * height).reshape(height, stride)
    return rows[:, :width * 4].reshape(height, width, 4)


def atomic_yaml_dump(obj: Any, path: Union[str, Path]) -> None:
    """Save object as YAML atomically (safe_dump, insertion order kept)."""
    yaml_str = yaml.safe_dump(
        obj,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True
    )
    atomic_write_bytes(path, yaml_str.encode('utf-8'))


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Load YAML file safely.

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    yaml.YAMLError
        If YAML parsing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e
