"""
Failures raised by the analysis pipeline.

InputError is the caller's fault (nothing was sent to the model). The two
Oracle* errors are upstream failures and are kept distinct so callers can
tell "could not reach the model" from "the model answered with garbage".
"""


class AnalysisError(Exception):
    """Base class for every failure surfaced by analyze_document()."""


class InputError(AnalysisError):
    """The document is missing or empty after trimming."""


class OracleTransportError(AnalysisError):
    """The scoring model could not be reached or returned an API error."""


class OracleOutputError(AnalysisError):
    """The scoring model replied, but not with the expected JSON structure."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw
