"""
Portable anymap (PGM/PPM) reader for reference images.
"""

import logging

import numpy as np

from .exceptions import AnymapFormatError
from .interleave import InterleaveMode, sample_dtype, triplet_to_planar

logger = logging.getLogger(__name__)

# magic -> (component count, binary raster)
ANYMAP_FORMATS = {
    b'P2': (1, False),
    b'P3': (3, False),
    b'P5': (1, True),
    b'P6': (3, True),
}

MAX_SAMPLE_VALUE = 65535


class RasterImage:
    """
    Reference raster: geometry, sample depth and pixel-interleaved samples.

    Samples deeper than 8 bits are stored as little-endian 16-bit words.
    """

    def __init__(self, width, height, bits_per_sample, component_count, image_data):
        self.width = width
        self.height = height
        self.bits_per_sample = bits_per_sample
        self.component_count = component_count
        self.image_data = image_data

    @property
    def sample_size(self):
        return 2 if self.bits_per_sample > 8 else 1

    def __repr__(self):
        return (f"RasterImage({self.width}x{self.height}, "
                f"bits_per_sample={self.bits_per_sample}, "
                f"component_count={self.component_count})")


def _read_header_values(data, pos, count):
    """Read `count` whitespace-separated integers, skipping # comments."""
    values = []
    while len(values) < count:
        if pos >= len(data):
            raise AnymapFormatError("Header ends before width, height and maxval")

        ch = data[pos:pos + 1]
        if ch == b'#':
            end = data.find(b'\n', pos)
            pos = len(data) if end == -1 else end + 1
        elif ch.isspace():
            pos += 1
        else:
            start = pos
            while pos < len(data) and not data[pos:pos + 1].isspace() and data[pos:pos + 1] != b'#':
                pos += 1
            token = data[start:pos]
            if not token.isdigit():
                raise AnymapFormatError(f"Invalid header value: {token!r}")
            values.append(int(token))

    # Exactly one whitespace character separates maxval from the raster
    return values, pos + 1


def _read_ascii_samples(raster, sample_count):
    lines = (line.split(b'#', 1)[0] for line in raster.splitlines())
    tokens = b' '.join(lines).split()
    if len(tokens) < sample_count:
        raise AnymapFormatError(
            f"Truncated pixel data: expected {sample_count} samples, got {len(tokens)}")
    try:
        return np.array([int(token) for token in tokens[:sample_count]], dtype=np.int64)
    except ValueError as e:
        raise AnymapFormatError(f"Invalid sample value: {e}") from e


def _read_binary_samples(raster, sample_count, maxval):
    dtype = np.dtype('>u2') if maxval > 255 else np.dtype('u1')
    byte_count = sample_count * dtype.itemsize
    if len(raster) < byte_count:
        raise AnymapFormatError(
            f"Truncated pixel data: expected {byte_count} bytes, got {len(raster)}")
    return np.frombuffer(raster[:byte_count], dtype=dtype)


def read_anymap_file(filename):
    """
    Load a PGM or PPM file.

    Args:
        filename: Path to a P2, P3, P5 or P6 file

    Returns:
        RasterImage: Samples in pixel-interleaved order

    Raises:
        AnymapFormatError: Unsupported format, bad header or truncated data
    """
    with open(filename, 'rb') as f:
        data = f.read()

    magic = data[:2]
    if magic not in ANYMAP_FORMATS:
        raise AnymapFormatError(f"Unsupported anymap format {magic!r} in {filename}")
    component_count, binary = ANYMAP_FORMATS[magic]

    (width, height, maxval), pos = _read_header_values(data, 2, 3)
    if width == 0 or height == 0:
        raise AnymapFormatError(f"Invalid image size {width}x{height}")
    if not 0 < maxval <= MAX_SAMPLE_VALUE:
        raise AnymapFormatError(f"Unsupported maxval {maxval}")

    bits_per_sample = maxval.bit_length()
    sample_count = width * height * component_count
    raster = data[pos:]

    if binary:
        samples = _read_binary_samples(raster, sample_count, maxval)
    else:
        samples = _read_ascii_samples(raster, sample_count)

    if samples.size and (int(samples.min()) < 0 or int(samples.max()) > maxval):
        raise AnymapFormatError(f"Sample value outside 0..{maxval}")

    image_data = bytearray(samples.astype(sample_dtype(bits_per_sample)).tobytes())

    logger.debug("Loaded %s: %dx%d, %d component(s), %d bits",
                 filename, width, height, component_count, bits_per_sample)

    return RasterImage(width, height, bits_per_sample, component_count, image_data)


def read_anymap_reference_file(filename, interleave_mode):
    """
    Load a reference image laid out for the given interleave mode.

    Color images tested without interleaving are converted to planar order;
    everything else stays pixel-interleaved.
    """
    reference_file = read_anymap_file(filename)

    if interleave_mode is InterleaveMode.NONE and reference_file.component_count == 3:
        reference_file.image_data = triplet_to_planar(
            reference_file.image_data,
            reference_file.width,
            reference_file.height,
            reference_file.bits_per_sample
        )

    return reference_file
