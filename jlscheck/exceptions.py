"""
Exceptions raised by the harness collaborators.

Pixel mismatches are not exceptions; they come back as failed results.
"""


class JlsCheckError(Exception):
    """Base exception for collaborator failures that abort a run."""
    pass


class AnymapFormatError(JlsCheckError):
    """A reference file could not be parsed as a portable anymap."""
    pass


class CodecError(JlsCheckError):
    """The JPEG-LS codec rejected its parameters or the bitstream."""
    pass
