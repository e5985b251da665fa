"""
Interleave modes and the pixel-major to planar transform.

Reference files are always loaded pixel-interleaved (R, G, B, R, G, B, ...).
JPEG-LS "none" interleave mode expects the components as three planes
instead, so the reference buffer is rearranged before encoding.
"""

import enum

import numpy as np


class InterleaveMode(enum.Enum):
    """JPEG-LS interleave modes, valued by their ILV code."""

    NONE = 0
    LINE = 1
    SAMPLE = 2

    @property
    def label(self):
        """Lowercase name used in reports and output filenames."""
        return self.name.lower()

    @classmethod
    def from_name(cls, name):
        """Parse a mode name ('none', 'line', 'sample'), case-insensitive."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown interleave mode: {name!r}") from None


def sample_dtype(bits_per_sample):
    """numpy dtype of one stored sample: a byte, or a little-endian word above 8 bits."""
    return np.dtype('<u2') if bits_per_sample > 8 else np.dtype('u1')


def triplet_to_planar(buffer, width, height, bits_per_sample):
    """
    Rearrange a 3-component pixel-interleaved buffer into three planes.

    Component c of pixel i (row-major) moves to position
    i + c * width * height. The caller guarantees exactly 3 components.

    Args:
        buffer: Pixel-interleaved sample bytes
        width: Image width in pixels
        height: Image height in pixels
        bits_per_sample: Sample depth; above 8 means 2-byte samples

    Returns:
        bytearray: Planar buffer of the same length
    """
    samples_per_plane = width * height
    if samples_per_plane == 0:
        return bytearray(len(buffer))

    samples = np.frombuffer(buffer, dtype=sample_dtype(bits_per_sample))
    planar = samples.reshape(samples_per_plane, 3).T
    return bytearray(np.ascontiguousarray(planar).tobytes())


def planar_to_triplet(buffer, width, height, bits_per_sample):
    """Inverse of triplet_to_planar."""
    samples_per_plane = width * height
    if samples_per_plane == 0:
        return bytearray(len(buffer))

    samples = np.frombuffer(buffer, dtype=sample_dtype(bits_per_sample))
    interleaved = samples.reshape(3, samples_per_plane).T
    return bytearray(np.ascontiguousarray(interleaved).tobytes())
