"""Exception types raised across Scriptoria."""

# Shown when a failure carries no message of its own
GENERIC_ERROR_MESSAGE = "Failed to process the uploaded image."


class ScriptoriaError(Exception):
    """Base class for all Scriptoria errors."""


class FileReadError(ScriptoriaError):
    """An uploaded file could not be read or encoded."""


class AnalysisError(ScriptoriaError):
    """The analysis service failed or returned no usable result."""


class InvalidRecordError(ScriptoriaError):
    """A manuscript record was built with inconsistent status, result and error."""


class InvalidTransitionError(ScriptoriaError):
    """A status transition was requested for a record that cannot take it."""
