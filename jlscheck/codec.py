"""
JPEG-LS encoder and decoder used by the harness.

CharLS does the actual coding. Encoding goes through pyjpegls, which takes
the raw sample buffer together with the frame geometry, bits per sample,
NEAR and scan interleave mode. Decoding goes through imagecodecs and the
samples are handed back in the layout of the stream's own interleave mode:
planar for NONE, pixel-interleaved for LINE and SAMPLE. Header fields
(frame geometry, NEAR, ILV) are read straight from the marker segments so
they can be inspected before decoding.
"""

import logging
import struct
from collections import namedtuple

import imagecodecs
import jpeg_ls
import numpy as np

from .exceptions import CodecError
from .interleave import InterleaveMode, sample_dtype

logger = logging.getLogger(__name__)

FrameInfo = namedtuple('FrameInfo', ['width', 'height', 'bits_per_sample', 'component_count'])
JpeglsHeader = namedtuple('JpeglsHeader', ['frame', 'near_lossless', 'interleave_mode'])

# JPEG-LS markers (ITU-T T.87)
MARKER_SOI = 0xD8
MARKER_EOI = 0xD9
MARKER_SOS = 0xDA
MARKER_SOF55 = 0xF7

# Room for SOI, SOF55, SOS and LSE segments on top of the raw samples
HEADER_RESERVE = 1024

MAX_NEAR_LOSSLESS = 255


def _byte_count(frame):
    sample_size = 2 if frame.bits_per_sample > 8 else 1
    return frame.width * frame.height * frame.component_count * sample_size


def read_header(source):
    """
    Parse the frame and first scan header of a JPEG-LS bitstream.

    Args:
        source: Encoded bytes

    Returns:
        JpeglsHeader: Frame geometry, NEAR and interleave mode

    Raises:
        CodecError: The stream is not a well-formed JPEG-LS stream
    """
    data = bytes(source)
    if len(data) < 2 or data[0] != 0xFF or data[1] != MARKER_SOI:
        raise CodecError("Missing start of image marker")

    pos = 2
    frame = None
    while True:
        if pos >= len(data) or data[pos] != 0xFF:
            raise CodecError(f"Expected marker at offset {pos}")
        while pos < len(data) and data[pos] == 0xFF:
            pos += 1
        if pos + 3 > len(data):
            raise CodecError("Bitstream ends inside a marker segment")

        marker = data[pos]
        (length,) = struct.unpack_from('>H', data, pos + 1)
        if length < 2 or pos + 1 + length > len(data):
            raise CodecError(f"Invalid segment length {length} for marker 0xFF{marker:02X}")
        segment = data[pos + 3:pos + 1 + length]

        if marker == MARKER_SOF55:
            if len(segment) < 6:
                raise CodecError("Frame header too short")
            bits_per_sample, height, width, component_count = struct.unpack_from('>BHHB', segment)
            frame = FrameInfo(width, height, bits_per_sample, component_count)
        elif marker == MARKER_SOS:
            if frame is None:
                raise CodecError("Start of scan before frame header")
            component_count = segment[0] if segment else 0
            params = 1 + 2 * component_count
            if len(segment) < params + 3:
                raise CodecError("Scan header too short")
            near_lossless, ilv = segment[params], segment[params + 1]
            try:
                interleave_mode = InterleaveMode(ilv)
            except ValueError:
                raise CodecError(f"Invalid interleave mode {ilv} in scan header") from None
            return JpeglsHeader(frame, near_lossless, interleave_mode)
        elif marker == MARKER_EOI:
            raise CodecError("End of image before start of scan")

        pos += 1 + length


class JpeglsEncoder:
    """
    Encodes raw sample buffers to JPEG-LS.

    The encoder is configured with the frame geometry, the interleave mode
    written to the scan header and the NEAR parameter, then writes into a
    caller-provided destination buffer.
    """

    def __init__(self, frame_info=None, interleave_mode=InterleaveMode.NONE, near_lossless=0):
        """
        Initialize the encoder.

        Args:
            frame_info: FrameInfo of the image to encode
            interleave_mode: Scan interleave mode, which also fixes the source layout
            near_lossless: NEAR value, 0 for lossless (0-255)
        """
        if not 0 <= near_lossless <= MAX_NEAR_LOSSLESS:
            raise CodecError(f"near_lossless must be between 0 and {MAX_NEAR_LOSSLESS}, got {near_lossless}")

        self.frame_info = frame_info
        self.interleave_mode = interleave_mode
        self.near_lossless = near_lossless

    def _require_frame(self):
        if self.frame_info is None:
            raise CodecError("Frame info must be set before encoding")
        return self.frame_info

    def estimated_destination_size(self):
        """Upper bound for the encoded size of the configured frame."""
        return _byte_count(self._require_frame()) + HEADER_RESERVE

    def encode(self, source, destination):
        """
        Encode source samples into destination.

        The scan is written with the configured interleave mode and the
        frame's bits per sample. Samples wider than 8 bits are little-endian
        16-bit words. NONE expects planar samples, LINE and SAMPLE
        pixel-interleaved ones.

        Args:
            source: Raw samples laid out for the configured interleave mode
            destination: Writable buffer, at least estimated_destination_size() long

        Returns:
            int: Number of bytes written to destination
        """
        frame = self._require_frame()
        if len(source) != _byte_count(frame):
            raise CodecError(
                f"Source size {len(source)} does not match frame ({_byte_count(frame)} bytes expected)")

        try:
            encoded = jpeg_ls.encode_buffer(
                bytes(source),
                rows=frame.height,
                columns=frame.width,
                samples_per_pixel=frame.component_count,
                bits_stored=frame.bits_per_sample,
                lossy_error=self.near_lossless,
                interleave_mode=self.interleave_mode.value,
            )
        except (RuntimeError, ValueError) as e:
            raise CodecError(f"JPEG-LS encode failed: {e}") from e

        if len(encoded) > len(destination):
            raise CodecError(
                f"Destination buffer too small: {len(destination)} bytes, {len(encoded)} needed")

        destination[:len(encoded)] = encoded
        return len(encoded)


class JpeglsDecoder:
    """
    Decodes a JPEG-LS bitstream into a caller-provided buffer.
    """

    def __init__(self, source, read_header=True):
        """
        Initialize the decoder.

        Args:
            source: Encoded bytes
            read_header: Parse the header immediately
        """
        self.source = bytes(source)
        self._header = None
        if read_header:
            self.read_header()

    def read_header(self):
        self._header = read_header(self.source)
        logger.debug("JPEG-LS header: %s", self._header)
        return self._header

    @property
    def header(self):
        if self._header is None:
            raise CodecError("Header has not been read")
        return self._header

    @property
    def frame_info(self):
        return self.header.frame

    @property
    def near_lossless(self):
        return self.header.near_lossless

    @property
    def interleave_mode(self):
        return self.header.interleave_mode

    def destination_size(self):
        """Bytes needed to hold the decoded samples."""
        return _byte_count(self.frame_info)

    def _arrange(self, decoded):
        frame = self.frame_info
        height, width, components = frame.height, frame.width, frame.component_count

        if decoded.size != height * width * components:
            raise CodecError(
                f"Decoded {decoded.size} samples, header describes {height * width * components}")

        if components == 1:
            return decoded.reshape(height, width)

        if decoded.shape == (height, width, components):
            pixels = decoded
        elif decoded.shape == (components, height, width):
            pixels = np.moveaxis(decoded, 0, -1)
        else:
            raise CodecError(f"Unexpected decoded shape {decoded.shape}")

        if self.interleave_mode is InterleaveMode.NONE:
            return np.moveaxis(pixels, -1, 0)
        return pixels

    def decode(self, destination):
        """
        Decode into destination.

        Samples are written in the layout of the stream's interleave mode:
        planar for NONE, pixel-interleaved for LINE and SAMPLE.

        Args:
            destination: Writable buffer, at least destination_size() long
        """
        if len(destination) < self.destination_size():
            raise CodecError(
                f"Destination buffer too small: {len(destination)} bytes, {self.destination_size()} needed")

        try:
            decoded = np.asarray(imagecodecs.jpegls_decode(self.source))
        except (RuntimeError, ValueError) as e:
            raise CodecError(f"JPEG-LS decode failed: {e}") from e

        samples = self._arrange(decoded)
        data = np.ascontiguousarray(samples).astype(sample_dtype(self.frame_info.bits_per_sample)).tobytes()
        destination[:len(data)] = data
