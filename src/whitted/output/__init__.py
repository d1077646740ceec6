"""Output module for image files.

Components:
    export: PNG writing, environment texture loading and image comparison
"""

from .export import compute_rmse, load_environment_map, load_png, save_png

__all__ = [
    "save_png",
    "load_png",
    "load_environment_map",
    "compute_rmse",
]
