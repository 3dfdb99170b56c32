"""Error taxonomy for the document processing pipeline.

Missing fields are not errors: they surface as compliance issues.
Only the image and OCR stages raise.
"""


class PipelineError(Exception):
    """Base class for failures that abort processing of a document."""


class IoError(PipelineError):
    """An image file could not be read or written."""


class UnsupportedFormatError(PipelineError):
    """The image codec could not decode the file."""


class OcrEngineError(PipelineError):
    """The OCR engine failed to start or crashed during recognition."""
