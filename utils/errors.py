class NotFoundError(Exception):
    """A record an operation depends on does not exist."""


class ExtractionError(Exception):
    """Text could not be extracted from an uploaded file."""


class LLMError(Exception):
    """The model returned nothing usable."""


class LLMConfigurationError(LLMError):
    """Credentials, endpoint or deployment are missing."""
