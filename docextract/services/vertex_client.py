"""Vertex AI generateContent client

Sends one document per request and returns the structured data parsed from
the model's reply. Failures are classified at this boundary so callers never
inspect error text:
- 429 or a RESOURCE_EXHAUSTED body -> RateLimitError (retryable)
- 401/403 -> AuthenticationError
- other non-2xx, timeouts, connection errors -> RemoteCallError
"""

import asyncio
import base64
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp

from docextract.models.config import VertexSettings
from docextract.models.vertex import GenerateContentRequest
from docextract.observability.logging import get_logger
from docextract.services.auth import get_access_token
from docextract.services.response_parser import (
    extract_generated_text,
    parse_generated_content,
)
from docextract.utils.exceptions import (
    AuthenticationError,
    RateLimitError,
    RemoteCallError,
    ResponseFormatError,
)

logger = get_logger("vertex_client")

# Quota rejections sometimes arrive with a non-429 status
QUOTA_EXHAUSTED_MARKER = "RESOURCE_EXHAUSTED"


class VertexAIClient:
    """Async client for the Vertex AI generateContent endpoint.

    Use as an async context manager so the HTTP session is closed:

        async with VertexAIClient(settings) as client:
            data = await client.extract_document(pdf_bytes)
    """

    def __init__(
        self,
        settings: VertexSettings,
        token_provider: Callable[[], Awaitable[str]] = get_access_token,
    ):
        self.settings = settings
        self._token_provider = token_provider
        self._token: Optional[str] = settings.access_token
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "VertexAIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(
                total=self.settings.request_timeout_seconds
            )
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_token(self) -> str:
        if self._token is None:
            self._token = await self._token_provider()
        return self._token

    def build_request(self, document: bytes) -> GenerateContentRequest:
        encoded = base64.b64encode(document).decode("ascii")
        return (
            GenerateContentRequest.for_document(
                encoded,
                prompt=self.settings.prompt,
                system_instruction=self.settings.system_instruction,
            )
            .with_temperature(self.settings.temperature)
            .with_max_tokens(self.settings.max_output_tokens)
            .with_top_p(self.settings.top_p)
        )

    async def extract_document(self, document: bytes) -> Any:
        """Send one document and return the JSON extracted from the reply.

        Args:
            document: Raw document bytes (PDF)

        Returns:
            Parsed JSON, or ``{"raw_text": ...}`` if the reply was not JSON

        Raises:
            RateLimitError: On HTTP 429
            AuthenticationError: On HTTP 401/403 or token failure
            RemoteCallError: On any other failure
        """
        payload = self.build_request(document).to_payload()
        response_json = await self._post(payload)

        logger.debug("vertex_generate_success", model=self.settings.model_id)
        return parse_generated_content(response_json)

    async def generate_text(self, prompt: str) -> str:
        """Send a text-only prompt and return the generated text.

        Raises:
            RateLimitError: On HTTP 429
            AuthenticationError: On HTTP 401/403 or token failure
            RemoteCallError: On any other failure
        """
        payload = GenerateContentRequest.for_text(prompt).to_payload()
        response_json = await self._post(payload)
        return extract_generated_text(response_json)

    async def _post(self, payload: Dict[str, Any]) -> Any:
        """POST a generateContent body and return the decoded JSON reply."""
        token = await self._get_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        session = await self._get_session()
        try:
            async with session.post(
                self.settings.endpoint, json=payload, headers=headers
            ) as response:
                if response.status == 429:
                    raise RateLimitError(
                        "API request failed with status code 429",
                        retry_after=_parse_retry_after(
                            response.headers.get("Retry-After")
                        ),
                    )

                if response.status in (401, 403):
                    self._token = self.settings.access_token
                    text = await response.text()
                    raise AuthenticationError(
                        f"API request failed with status code {response.status}: {text}",
                        status=response.status,
                    )

                if response.status >= 300:
                    text = await response.text()
                    if QUOTA_EXHAUSTED_MARKER in text:
                        raise RateLimitError(
                            f"API request failed with status code {response.status}: {text}"
                        )
                    raise RemoteCallError(
                        f"API request failed with status code {response.status}: {text}",
                        status=response.status,
                    )

                response_json = await response.json(content_type=None)

        except asyncio.TimeoutError:
            raise RemoteCallError("Vertex AI request timed out")
        except aiohttp.ClientError as e:
            raise RemoteCallError(f"Failed to make Vertex AI API request: {e}")
        except ValueError as e:
            raise ResponseFormatError(f"Failed to parse API response as JSON: {e}")

        return response_json


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
