"""LLM client for OpenAI-compatible chat completion APIs."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import httpx

from .error_handler import LLMError, LLMFailure, LLMTimeout

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Configuration for an LLM endpoint."""
    base_url: str
    api_key: str
    default_model: str = "gpt-4-turbo"
    max_tokens: int = 4096
    timeout: float = 60.0
    name: str = "openai"


@dataclass
class LLMRequest:
    """Request to an LLM provider."""
    messages: List[Dict[str, str]]
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    additional_params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def chat(cls, system_prompt: str, user_message: str, **kwargs: Any) -> "LLMRequest":
        return cls(
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            **kwargs,
        )


@dataclass
class LLMResponse:
    """Response from an LLM provider."""
    content: str
    model: str
    provider: str
    usage: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


class CompletionService(Protocol):
    async def complete(self, request: LLMRequest) -> LLMResponse: ...


class LLMClient:
    """Chat completion client; HTTP failures come back as ``LLMResponse.error``."""

    def __init__(self, config: LLMConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            timeout=config.timeout,
            headers={"User-Agent": "codepilot/0.1.0"},
        )
        logger.info(f"Initialized LLM client for {config.name} ({config.default_model})")

    @classmethod
    def from_settings(cls, settings: Any) -> "LLMClient":
        return cls(LLMConfig(
            base_url=settings.openai_base_url,
            api_key=settings.openai_api_key or "",
            default_model=settings.openai_model,
            timeout=settings.llm_timeout_seconds,
        ))

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def _get_endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/chat/completions"

    def _format_request(self, request: LLMRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": request.model or self.config.default_model,
            "messages": request.messages,
            "max_tokens": request.max_tokens or self.config.max_tokens,
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        payload.update(request.additional_params)
        return payload

    def _parse_response(self, data: Dict[str, Any], model: str) -> LLMResponse:
        choices = data.get("choices") or []
        message = choices[0].get("message", {}) if choices else {}
        return LLMResponse(
            content=message.get("content") or "",
            model=data.get("model", model),
            provider=self.config.name,
            usage=data.get("usage", {}),
        )

    async def complete(self, request: LLMRequest) -> LLMResponse:
        """Complete a chat request."""
        payload = self._format_request(request)
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        try:
            logger.debug(f"Making request to {self.config.name}: {self._get_endpoint()}")
            response = await self.client.post(self._get_endpoint(), json=payload, headers=headers)
            response.raise_for_status()
            llm_response = self._parse_response(response.json(), payload["model"])
            logger.info(f"Completed request to {self.config.name} - tokens: {llm_response.usage}")
            return llm_response

        except httpx.HTTPStatusError as e:
            error_msg = f"HTTP error {e.response.status_code} from {self.config.name}: {e.response.text}"
            logger.error(error_msg)
            return LLMResponse(content="", model=payload["model"], provider=self.config.name, error=error_msg)

        except (httpx.HTTPError, ValueError) as e:
            error_msg = f"Error calling {self.config.name}: {str(e)}"
            logger.error(error_msg)
            return LLMResponse(content="", model=payload["model"], provider=self.config.name, error=error_msg)


async def request_completion(llm: CompletionService, request: LLMRequest, timeout: float) -> str:
    """Run one completion under the timeout contract and return its text.

    On expiry the call is abandoned; the transport is not guaranteed to be
    cancelled.

    Raises:
        LLMTimeout: no answer within ``timeout`` seconds
        LLMFailure: the service reported or raised an error
    """
    try:
        response = await asyncio.wait_for(llm.complete(request), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise LLMTimeout(timeout) from e
    except LLMError:
        raise
    except Exception as e:
        raise LLMFailure(f"LLM request failed: {e}") from e

    if response.error:
        raise LLMFailure(response.error)
    return response.content
