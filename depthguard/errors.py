"""
Error kinds raised by the depth analysis stages.

Every stage raises; only the result assembler catches and turns the failure
into a terminal verdict status.
"""


class DepthAnalysisError(Exception):
    """Base class for recoverable depth analysis failures."""


class InvalidGeometry(DepthAnalysisError):
    """Image or depth dimensions are zero (or the payload cannot hold them)."""


class EmptyRegion(DepthAnalysisError):
    """The face rectangle maps to nothing inside the depth buffer."""


class NoValidSamples(DepthAnalysisError):
    """Every sample in the face region was filtered out as out of range."""


class UnsupportedEncoding(DepthAnalysisError):
    """The depth buffer declares a sample format we cannot decode."""
