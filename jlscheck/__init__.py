"""
jlscheck - JPEG-LS round-trip conformance checks for PGM/PPM reference images
"""

__version__ = "0.1.0"

from .interleave import InterleaveMode, triplet_to_planar
from .anymap import RasterImage, read_anymap_file
from .verifier import verify_round_trip
from .checker import check_file, check_color_file
from .runner import run_directory

__all__ = [
    "InterleaveMode",
    "triplet_to_planar",
    "RasterImage",
    "read_anymap_file",
    "verify_round_trip",
    "check_file",
    "check_color_file",
    "run_directory",
]
