"""Exception types raised by the store, the AI client and the coach session."""
from __future__ import annotations


class JobFlowError(Exception):
    """Base class for every error this package raises on purpose."""


class ValidationError(JobFlowError, ValueError):
    """Bad or missing input; the store is left untouched."""


class EmptyMessageError(ValidationError):
    pass


class SessionBusyError(JobFlowError):
    """A coach reply is still pending for this session."""


class CollaboratorError(JobFlowError):
    """Failure talking to the generative-language service."""


class MissingCredentialError(CollaboratorError):
    def __init__(self, message: str = "Gemini API key is required. Please add it in Settings.") -> None:
        super().__init__(message)


class GenerationError(CollaboratorError):
    """Network or service failure after retries were exhausted."""


class ResumeParseError(CollaboratorError):
    """The service answered, but not with the JSON résumé we asked for."""
