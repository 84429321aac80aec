"""Custom exceptions for the document extraction batch

This module defines the exception hierarchy for the dispatch layer:
- Base exception for all pipeline errors
- Retryable errors (remote rate limiting)
- Terminal remote errors (auth, malformed payloads, server errors)
- Retry exhaustion and response parsing errors
- gcloud CLI and project setup failures

All exceptions inherit from PipelineError to allow catching all pipeline-related
errors in a single except block when needed.
"""

from typing import Optional


class PipelineError(Exception):
    """Base exception for all pipeline errors

    Use this to catch any error raised while processing a unit of work:
    ```python
    try:
        await request_queue.execute(task)
    except PipelineError as e:
        logger.error("unit_failed", error=str(e))
    ```
    """

    pass


class RetryableError(PipelineError):
    """Base for retryable (transient) errors.

    Errors that inherit from this class indicate transient failures
    that may succeed on retry.
    """

    pass


class RateLimitError(RetryableError):
    """Remote rate limit rejection with optional retry-after metadata.

    Raised when:
    - API returns 429 status
    - API reports RESOURCE_EXHAUSTED for the project quota
    """

    def __init__(self, message: str, retry_after: Optional[float] = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class RemoteCallError(PipelineError):
    """Remote inference call failed with a non-retryable error

    Raised when:
    - API returns a non-success status other than 429
    - Request times out or the connection fails
    - Response does not contain generated content
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class AuthenticationError(RemoteCallError):
    """Credentials were rejected (401/403) or could not be obtained."""

    pass


class ResponseFormatError(RemoteCallError):
    """Response body did not have the expected candidates/content shape."""

    pass


class JSONParseError(PipelineError):
    """Failed to parse JSON out of the model's response text

    Raised when:
    - Response text is not valid JSON
    - No fenced code block contains valid JSON
    """

    pass


class RetryExhaustedError(PipelineError):
    """All outer attempts for a unit failed with rate-limit errors."""

    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(
            f"Rate limit retries exhausted after {attempts} attempts: {last_error}"
        )
        self.attempts = attempts
        self.last_error = last_error


class GCloudCommandError(PipelineError):
    """A gcloud CLI invocation failed, timed out, or gcloud is missing."""

    def __init__(
        self,
        message: str,
        stderr: str = "",
        returncode: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


class SetupError(PipelineError):
    """Project setup could not be completed

    Raised when:
    - The Vertex AI service cannot be listed or enabled
    - No Google Cloud project is configured
    - gcloud output cannot be parsed
    """

    pass
