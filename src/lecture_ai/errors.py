"""
Error taxonomy shared by the processing pipeline and the HTTP layer.

Each error carries the HTTP status the API maps it to.
"""


class LectureAIError(Exception):
    status_code = 500


class ConfigurationError(LectureAIError):
    """Required provider credentials are missing. Fatal, never retried."""

    status_code = 503


class ProviderError(LectureAIError):
    """An external transcription/summarization/LLM call did not succeed."""

    status_code = 502


class NotFoundError(LectureAIError):
    """Unknown lecture/task id, or no audio could be located."""

    status_code = 404


class ParseError(LectureAIError):
    """An AI-delegated reply was not well-formed."""

    status_code = 502


class PreconditionError(LectureAIError):
    """A processing step was requested from a state that does not allow it."""

    status_code = 400


class ConflictError(LectureAIError):
    """A lecture was modified concurrently (stale version)."""

    status_code = 409
