"""Anthropic Messages API client for free-text completions"""

import httpx

from payroll_gateway.config import settings
from payroll_gateway.domain.exceptions import MalformedResponse, TransportFailure
from payroll_gateway.infrastructure.observability.metrics import completion_latency_histogram


class CompletionClient:
    """Client for the external language model completion API"""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.base_url = (base_url or settings.anthropic_api_base).rstrip("/")
        self.model = model or settings.completion_model
        self.max_tokens = max_tokens or settings.completion_max_tokens
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": settings.anthropic_version,
            "content-type": "application/json",
        }

    async def complete(self, prompt: str) -> str:
        """
        Send a single user message and return the text of the first content block.

        A reply whose first block is not text yields "".

        Raises:
            TransportFailure: On timeout, HTTP errors, or network failures
            MalformedResponse: Response body is not a Messages API envelope
        """
        body = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with completion_latency_histogram.time():
                    response = await client.post(
                        f"{self.base_url}/v1/messages",
                        headers=self._headers(),
                        json=body,
                    )
                response.raise_for_status()
                data = response.json()

                block = data["content"][0]
                return block["text"] if block.get("type") == "text" else ""

            except httpx.TimeoutException as e:
                raise TransportFailure(f"Completion API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise TransportFailure(f"Completion API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise TransportFailure(f"Completion API unreachable: {e}") from e
            except (KeyError, IndexError, ValueError, TypeError, AttributeError) as e:
                raise MalformedResponse(f"Invalid completion envelope: {e!r}") from e
