"""Custom exceptions for document generation operations."""

from __future__ import annotations

from matins.generation.constants import MAX_TEMPERATURE, MIN_TEMPERATURE

# Content preview length for error messages
_CONTENT_PREVIEW_LIMIT = 100


def _preview(content: str) -> str:
    if len(content) > _CONTENT_PREVIEW_LIMIT:
        return content[:_CONTENT_PREVIEW_LIMIT] + "..."
    return content


class GenerationError(Exception):
    """Base exception for all generation-service errors.

    Every subclass is treated as a retryable failure by the assisted
    renderer, so this is the single catch point for service problems.
    """


class OpenAIAPIError(GenerationError):
    """Raised when the OpenAI-compatible API returns an error response.

    Attributes
    ----------
    status_code
        HTTP status code from the API response, if available.

    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise the error with message and optional status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, body: str = "") -> OpenAIAPIError:
        """Create error for HTTP error responses.

        Parameters
        ----------
        status_code
            HTTP status code from the response.
        body
            Response body, truncated into the message.

        Returns
        -------
        OpenAIAPIError
            Error with status code context.

        """
        msg = f"OpenAI API HTTP error {status_code}"
        if body:
            msg = f"{msg}: {_preview(body)}"
        return cls(msg, status_code=status_code)

    @classmethod
    def rate_limited(cls, retry_after: int | None = None) -> OpenAIAPIError:
        """Create error for rate limit (429) responses."""
        msg = "OpenAI API rate limited"
        if retry_after is not None:
            msg = f"{msg}, retry after {retry_after}s"
        return cls(msg, status_code=429)

    @classmethod
    def timeout(cls) -> OpenAIAPIError:
        """Create error for request timeouts."""
        return cls("OpenAI API request timed out")

    @classmethod
    def network_error(cls, detail: str) -> OpenAIAPIError:
        """Create error for network failures (DNS, connection, TLS, etc.)."""
        return cls(f"OpenAI API network error: {detail}")


class OpenAIResponseShapeError(GenerationError):
    """Raised when a response is missing expected fields or is malformed."""

    @classmethod
    def missing(cls, field: str) -> OpenAIResponseShapeError:
        """Create error for missing response field.

        Parameters
        ----------
        field
            Name or path of the missing field.

        Returns
        -------
        OpenAIResponseShapeError
            Error with field context.

        """
        return cls(f"OpenAI response missing expected field: {field}")

    @classmethod
    def invalid_json(cls, content: str) -> OpenAIResponseShapeError:
        """Create error for invalid JSON, with a truncated content preview."""
        return cls(f"Failed to parse JSON from response: {_preview(content)}")


class OpenAIConfigError(GenerationError):
    """Raised when the OpenAI client configuration is unusable."""

    @classmethod
    def missing_api_key(cls) -> OpenAIConfigError:
        """Create error for a missing ``MATINS_OPENAI_API_KEY`` variable."""
        return cls("MATINS_OPENAI_API_KEY environment variable is required")

    @classmethod
    def empty_api_key(cls) -> OpenAIConfigError:
        """Create error for empty API key."""
        return cls("OpenAI API key must be non-empty")


class GeneratorConfigError(Exception):
    """Raised when generation settings read from the environment are invalid.

    Unlike :class:`GenerationError` this is not retryable: it surfaces while
    the generator is being constructed, before any document is rendered.
    """

    @classmethod
    def invalid_parameter(
        cls, parameter_name: str, value: str, constraint: str
    ) -> GeneratorConfigError:
        """Create error for an invalid configuration parameter value.

        Parameters
        ----------
        parameter_name
            The name of the parameter that failed validation.
        value
            The invalid value that was provided.
        constraint
            A description of the valid value requirements.

        Returns
        -------
        GeneratorConfigError
            Error with formatted message describing the invalid parameter.

        """
        return cls(f"Invalid {parameter_name} '{value}'. {constraint}")

    @classmethod
    def invalid_temperature(cls, value: str) -> GeneratorConfigError:
        """Create error for invalid temperature value."""
        return cls.invalid_parameter(
            "MATINS_OPENAI_TEMPERATURE",
            value,
            f"Must be a float between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}",
        )

    @classmethod
    def invalid_max_tokens(cls, value: str) -> GeneratorConfigError:
        """Create error for invalid max_tokens value."""
        return cls.invalid_parameter(
            "MATINS_OPENAI_MAX_TOKENS", value, "Must be a positive integer"
        )

    @classmethod
    def invalid_timeout(cls, value: str) -> GeneratorConfigError:
        """Create error for invalid request timeout value."""
        return cls.invalid_parameter(
            "MATINS_OPENAI_TIMEOUT_S", value, "Must be a positive number of seconds"
        )
