"""MCP client for tool providers that speak JSON-RPC over HTTP with SSE framing"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional

import httpx

from ..models.jsonrpc import JSONRPCRequest, JSONRPCResponse
from ..models.tool import ToolDescriptor
from .error_handler import DecodeError, ProtocolError, ProviderConnectionError, RateLimitExhausted

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data: "
DISCOVERY_REQUEST_ID = 1
INVOCATION_REQUEST_ID = 2
MAX_DISCOVERY_ATTEMPTS = 3
REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json, text/event-stream",
}

Sleeper = Callable[[float], Awaitable[None]]


def iter_sse_envelopes(body: str) -> Iterator[JSONRPCResponse]:
    """Yield every JSON-RPC envelope carried on an SSE ``data:`` line.

    Lines that are not data lines, or whose payload is not a JSON object, are
    skipped.
    """
    for line in body.splitlines():
        if not line.startswith(SSE_DATA_PREFIX):
            continue
        envelope = JSONRPCResponse.parse(line[len(SSE_DATA_PREFIX):])
        if envelope is not None:
            yield envelope


class McpHttpClient:
    """Talks to one provider endpoint; at most one request in flight at a time."""

    def __init__(
        self,
        url: str,
        name: str = "provider",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        sleep: Sleeper = asyncio.sleep,
        max_attempts: int = MAX_DISCOVERY_ATTEMPTS,
    ):
        self.url = url
        self.name = name
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._owns_client = http_client is None
        if http_client is not None:
            self._client = http_client
        elif timeout is not None:
            self._client = httpx.AsyncClient(timeout=timeout)
        else:
            self._client = httpx.AsyncClient()

    async def __aenter__(self) -> "McpHttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(self, request: JSONRPCRequest) -> httpx.Response:
        try:
            return await self._client.post(
                self.url,
                json=request.model_dump(),
                headers=REQUEST_HEADERS,
            )
        except httpx.HTTPError as e:
            raise ProviderConnectionError(
                f"Could not reach {self.name} MCP at {self.url}: {e}",
                details={"method": request.method},
            ) from e

    async def discover_tools(self) -> List[ToolDescriptor]:
        """Send tools/list and return the advertised tools in server order.

        A 429 answer is retried (``attempt * 2`` seconds apart) until
        ``max_attempts`` requests have been made.

        Raises:
            RateLimitExhausted: every attempt was answered with 429
            ProtocolError: any other non-success status
            DecodeError: no SSE data line carried a ``result.tools`` array
        """
        request = JSONRPCRequest(id=DISCOVERY_REQUEST_ID, method="tools/list")

        for attempt in range(1, self.max_attempts + 1):
            response = await self._post(request)

            if response.is_success:
                for envelope in iter_sse_envelopes(response.text):
                    tools = envelope.tools()
                    if tools is not None:
                        logger.info(f"Discovered {len(tools)} tools from {self.name} MCP")
                        return [ToolDescriptor.from_wire(raw) for raw in tools]
                raise DecodeError(
                    f"No valid tools found in {self.name} MCP response",
                    details={"status": response.status_code},
                )

            if response.status_code == 429:
                if attempt < self.max_attempts:
                    delay = attempt * 2
                    logger.warning(
                        f"{self.name} MCP rate limited tools/list (attempt {attempt}/{self.max_attempts}), "
                        f"retrying in {delay}s"
                    )
                    await self._sleep(delay)
                    continue
                raise RateLimitExhausted(attempt, details={"method": "tools/list"})

            raise ProtocolError(
                response.status_code,
                f"Failed to fetch tools from {self.name} MCP: HTTP {response.status_code}",
            )

        # Only reachable with max_attempts < 1
        raise RateLimitExhausted(0, details={"method": "tools/list"})

    async def invoke_tool(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Send tools/call and return the ``result`` object.

        SSE framing is tried first; a bare JSON-RPC body is accepted as a
        fallback. There is no retry on 429 for invocations.
        """
        request = JSONRPCRequest(
            id=INVOCATION_REQUEST_ID,
            method="tools/call",
            params={"name": name, "arguments": arguments},
        )
        response = await self._post(request)

        if not response.is_success:
            raise ProtocolError(
                response.status_code,
                f"Failed to execute tool on {self.name} MCP: HTTP {response.status_code}",
            )

        body = response.text
        for envelope in iter_sse_envelopes(body):
            result = envelope.result_object()
            if result is not None:
                return result

        envelope = JSONRPCResponse.parse(body)
        if envelope is not None:
            result = envelope.result_object()
            if result is not None:
                logger.debug(f"{self.name} MCP answered tools/call without SSE framing")
                return result

        raise DecodeError(
            f"No valid result found in {self.name} MCP response",
            details={"tool": name, "status": response.status_code},
        )

    async def list_operations(self) -> List[str]:
        """Names of the provider's tools, in server order."""
        return [tool.name for tool in await self.discover_tools()]
