"""
Single-file checks: encode a reference image in one or all interleave modes,
write the bitstream next to the source and verify the round trip.
"""

import logging
import time
from collections import namedtuple
from pathlib import Path

import click

from .anymap import read_anymap_reference_file
from .codec import FrameInfo, JpeglsEncoder
from .interleave import InterleaveMode
from .verifier import verify_round_trip

logger = logging.getLogger(__name__)

TestOutcome = namedtuple('TestOutcome', [
    'passed',
    'original_size',
    'encoded_size',
    'compression_ratio',
    'encode_duration',
    'decode_duration',
    'interleave_mode',
    'output_path',
])

# Cheapest and most common mode first
COLOR_INTERLEAVE_MODES = (InterleaveMode.NONE, InterleaveMode.LINE, InterleaveMode.SAMPLE)


def generate_output_filename(source_filename, interleave_mode):
    """<stem>-<mode>.jls in the directory of the source file."""
    source = Path(source_filename)
    return source.with_name(f"{source.stem}-{interleave_mode.label}.jls")


def check_file(source_filename, interleave_mode=InterleaveMode.NONE, color=False,
               near_lossless=0, write_output=True):
    """
    Encode a reference file in one interleave mode and verify the round trip.

    Args:
        source_filename: PGM/PPM reference file
        interleave_mode: Interleave mode to encode with
        color: Pad the mode name for the three-mode color report
        near_lossless: NEAR value handed to the encoder
        write_output: Write the bitstream to <stem>-<mode>.jls

    Returns:
        TestOutcome: Result and metrics of this check
    """
    # Step 1: Load the reference, planar when testing without interleaving
    reference_file = read_anymap_reference_file(source_filename, interleave_mode)
    original = reference_file.image_data

    # Step 2: Configure the encoder for this frame
    encoder = JpeglsEncoder(
        frame_info=FrameInfo(reference_file.width, reference_file.height,
                             reference_file.bits_per_sample, reference_file.component_count),
        interleave_mode=interleave_mode,
        near_lossless=near_lossless
    )
    encoded = bytearray(encoder.estimated_destination_size())

    # Step 3: Encode and drop the unused tail of the estimate
    start = time.perf_counter()
    encoded_size = encoder.encode(original, encoded)
    encode_duration = (time.perf_counter() - start) * 1000
    del encoded[encoded_size:]

    # Step 4: Keep the bitstream next to the source
    output_path = None
    if write_output:
        output_path = generate_output_filename(source_filename, interleave_mode)
        with open(output_path, 'wb') as f:
            f.write(encoded)
        logger.debug("Wrote %s", output_path)

    compression_ratio = len(original) / encoded_size

    # Step 5: Decode and compare
    result = verify_round_trip(encoded, original)

    mode_width = 6 if color else 4
    click.echo(
        f" Info: original size = {len(original)}, encoded size = {encoded_size}, "
        f"interleave mode = {interleave_mode.label:<{mode_width}}, "
        f"compression ratio = {compression_ratio:.2f}:1, "
        f"encode time = {encode_duration:.4g} ms, decode time = {result.decode_duration:.4g} ms"
    )

    return TestOutcome(
        passed=result.passed,
        original_size=len(original),
        encoded_size=encoded_size,
        compression_ratio=compression_ratio,
        encode_duration=encode_duration,
        decode_duration=result.decode_duration,
        interleave_mode=interleave_mode,
        output_path=output_path
    )


def check_color_file(source_filename, **options):
    """
    Check a color reference file in every interleave mode.

    Stops at the first failing mode.

    Returns:
        bool: True when all modes pass
    """
    for interleave_mode in COLOR_INTERLEAVE_MODES:
        outcome = check_file(source_filename, interleave_mode, color=True, **options)
        if not outcome.passed:
            return False

    return True
