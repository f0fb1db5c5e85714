"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Scene config validation (validators)
    - Colors and gamma blending (color)
    - Points, vectors and batched curve evaluation (geometry)
    - Atomic I/O and image output (fs)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (rasterizer, paths, scene).

Convenience imports:
    from vecraster.utils import fs, color, geometry, validators
    from vecraster.utils.logging_config import setup_logging, push_context
"""

# Re-export commonly used modules for convenience
from . import color
from . import fs
from . import geometry
from . import logging_config
from . import validators

# Common functions for direct import
from .logging_config import push_context, setup_logging

__all__ = [
    # Modules
    'color',
    'fs',
    'geometry',
    'logging_config',
    'validators',
    # Direct exports
    'setup_logging',
    'push_context',
]
