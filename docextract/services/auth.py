"""Bearer token acquisition for Vertex AI calls via the gcloud CLI."""

from docextract.observability.logging import get_logger
from docextract.services.gcloud import run_gcloud
from docextract.utils.exceptions import AuthenticationError, GCloudCommandError

logger = get_logger("auth")


async def get_access_token(timeout_seconds: float = 30.0) -> str:
    """Run ``gcloud auth print-access-token`` and return the token.

    Raises:
        AuthenticationError: If gcloud is missing, fails, or prints nothing
    """
    try:
        token = await run_gcloud(
            "auth", "print-access-token", timeout_seconds=timeout_seconds
        )
    except GCloudCommandError as e:
        if e.returncode is None:
            raise AuthenticationError(f"Failed to get access token: {e}") from e
        raise AuthenticationError(f"Failed to get access token: {e.stderr}") from e

    if not token:
        raise AuthenticationError("gcloud returned an empty access token")

    logger.debug("access_token_acquired")
    return token
