"""
Round-trip verification: decode an encoded stream and compare it with the
samples that were fed to the encoder.
"""

import logging
import time
from collections import namedtuple

import click
import numpy as np

from .codec import JpeglsDecoder
from .interleave import sample_dtype

logger = logging.getLogger(__name__)

RoundTripResult = namedtuple('RoundTripResult', ['passed', 'decode_duration', 'near_lossless', 'reason'])


def first_mismatch(decoded, original):
    """Offset of the first differing byte, or None when equal."""
    if not original:
        return None
    differences = np.flatnonzero(
        np.frombuffer(decoded, dtype=np.uint8) != np.frombuffer(original, dtype=np.uint8))
    return int(differences[0]) if differences.size else None


def max_sample_error(decoded, original, bits_per_sample):
    """Largest absolute per-sample difference between two equally sized buffers."""
    if not original:
        return 0
    dtype = sample_dtype(bits_per_sample)
    error = np.abs(np.frombuffer(decoded, dtype=dtype).astype(np.int32)
                   - np.frombuffer(original, dtype=dtype).astype(np.int32))
    return int(error.max())


def verify_round_trip(encoded_source, original_source):
    """
    Decode a bitstream and check it against the original samples.

    Lossless streams (NEAR == 0) must match byte for byte. Near-lossless
    streams must keep every sample within NEAR of the original.

    Args:
        encoded_source: JPEG-LS bitstream
        original_source: Samples that were encoded, laid out for the stream's interleave mode

    Returns:
        RoundTripResult: Pass/fail, decode time in milliseconds and the failure reason
    """
    decoder = JpeglsDecoder(encoded_source, read_header=True)

    decoded = bytearray(decoder.destination_size())

    start = time.perf_counter()
    decoder.decode(decoded)
    decode_duration = (time.perf_counter() - start) * 1000

    near_lossless = decoder.near_lossless

    if len(decoded) != len(original_source):
        click.echo("Pixel data size doesn't match")
        logger.debug("Decoded %d bytes, original has %d", len(decoded), len(original_source))
        return RoundTripResult(False, decode_duration, near_lossless, 'size')

    if near_lossless == 0:
        offset = first_mismatch(decoded, original_source)
        if offset is not None:
            click.echo("Pixel data value doesn't match")
            logger.debug("First mismatch at byte %d: decoded %d, original %d",
                         offset, decoded[offset], original_source[offset])
            return RoundTripResult(False, decode_duration, near_lossless, 'value')
    else:
        error = max_sample_error(decoded, original_source, decoder.frame_info.bits_per_sample)
        if error > near_lossless:
            click.echo("Pixel data exceeds near-lossless bound")
            logger.debug("Maximum sample error %d, NEAR %d", error, near_lossless)
            return RoundTripResult(False, decode_duration, near_lossless, 'bound')

    return RoundTripResult(True, decode_duration, near_lossless, None)
