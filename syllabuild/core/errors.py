"""Error taxonomy for the generation pipeline.

Every error carries the HTTP status the boundary should answer with.
"""


class SyllabuildError(Exception):
    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: str = None, status_code: int = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ConfigError(SyllabuildError):
    """A required setting (API credential) is missing."""
    default_message = "Missing OPENAI_API_KEY. Set it in .env or the hosting environment."


class ValidationError(SyllabuildError):
    """Caller-supplied input failed a precondition."""
    status_code = 400
    default_message = "Invalid request"


class UpstreamError(SyllabuildError):
    """The remote model endpoint returned a non-success status."""
    default_message = "OpenAI request failed"


class MalformedOutputError(SyllabuildError):
    """Model output could not be coerced into JSON."""
    default_message = "Model output was not valid JSON."


class GenerationError(SyllabuildError):
    """A generation pass produced output of the wrong shape."""
    default_message = "Course generation failed"
