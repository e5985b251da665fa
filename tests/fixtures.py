"""
Reference image helpers for the tests.
"""

import numpy as np
from PIL import Image

from jlscheck.codec import FrameInfo, JpeglsEncoder
from jlscheck.interleave import InterleaveMode, triplet_to_planar


def gradient_image(width, height, components=1, maxval=255):
    """Smooth synthetic image, compressible and with distinct components."""
    y, x = np.mgrid[0:height, 0:width]
    base = x * 3 + y * 5
    if components == 3:
        data = np.stack([base, base * 2 + 1, base + 40], axis=-1)
    else:
        data = base
    dtype = np.uint16 if maxval > 255 else np.uint8
    return (data % (maxval + 1)).astype(dtype)


def save_anymap(path, array):
    """Write an 8-bit PGM/PPM with Pillow."""
    Image.fromarray(array).save(path)
    return path


def write_binary_anymap(path, array, maxval):
    """Write a P5/P6 file by hand, big-endian words above 255."""
    magic = b'P6' if array.ndim == 3 else b'P5'
    height, width = array.shape[:2]
    dtype = '>u2' if maxval > 255 else 'u1'
    with open(path, 'wb') as f:
        f.write(magic + f"\n{width} {height}\n{maxval}\n".encode('ascii'))
        f.write(np.ascontiguousarray(array).astype(dtype).tobytes())
    return path


def write_ascii_anymap(path, array, maxval, comment=None):
    """Write a P2/P3 file, optionally with a header comment."""
    magic = 'P3' if array.ndim == 3 else 'P2'
    height, width = array.shape[:2]
    lines = [magic]
    if comment:
        lines.append(f"# {comment}")
    lines.append(f"{width} {height}")
    lines.append(str(maxval))
    for row in array.reshape(height, -1):
        lines.append(' '.join(str(int(v)) for v in row))
    with open(path, 'w') as f:
        f.write('\n'.join(lines) + '\n')
    return path


def encode(pixels, interleave_mode=InterleaveMode.SAMPLE, bits=8, near_lossless=0):
    """Encode a numpy image with JpeglsEncoder, returning the truncated bitstream."""
    components = pixels.shape[2] if pixels.ndim == 3 else 1
    frame = FrameInfo(pixels.shape[1], pixels.shape[0], bits, components)
    source = bytearray(pixels.astype('<u2' if bits > 8 else 'u1').tobytes())
    if interleave_mode is InterleaveMode.NONE and components == 3:
        source = triplet_to_planar(source, frame.width, frame.height, bits)

    encoder = JpeglsEncoder(frame_info=frame, interleave_mode=interleave_mode, near_lossless=near_lossless)
    destination = bytearray(encoder.estimated_destination_size())
    size = encoder.encode(source, destination)
    return bytes(destination[:size]), source
