"""
Test configuration and shared fixtures for codepilot tests.

Provider endpoints and the LLM service are scripted through
``httpx.MockTransport`` handlers and an in-memory completion service, so no
test touches the network.
"""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest

from codepilot.config import Settings
from codepilot.models.tool import ToolDescriptor
from codepilot.services.catalog import ToolCatalog
from codepilot.services.llm_client import LLMRequest, LLMResponse
from codepilot.services.mcp_client import McpHttpClient


def sse_body(payload: Dict[str, Any], event: str = "message") -> str:
    """Frame one JSON-RPC payload the way an SSE provider does."""
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


def tools_payload(tools: List[Dict[str, Any]], request_id: int = 1) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": {"tools": tools}}


def result_payload(result: Any, request_id: int = 2) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


class RecordingSleep:
    """Stands in for asyncio.sleep and records every requested delay."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeLLM:
    """Completion service answering from a script of replies.

    A reply may be a string, an exception to raise, or an ``LLMResponse``.
    """

    def __init__(self, *replies: Union[str, Exception, LLMResponse], delay: float = 0.0):
        self.replies = list(replies)
        self.delay = delay
        self.requests: List[LLMRequest] = []

    async def complete(self, request: LLMRequest) -> LLMResponse:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, LLMResponse):
            return reply
        return LLMResponse(content=reply, model="test-model", provider="fake")


class ScriptedProvider:
    """MockTransport handler that answers tools/list and tools/call separately."""

    def __init__(
        self,
        tools: Optional[List[Dict[str, Any]]] = None,
        call_result: Any = None,
        list_responses: Optional[List[httpx.Response]] = None,
        call_response: Optional[Callable[[Dict[str, Any]], httpx.Response]] = None,
    ):
        self.tools = tools or []
        self.call_result = call_result if call_result is not None else {"ok": True}
        self.list_responses = list(list_responses or [])
        self.call_response = call_response
        self.requests: List[Dict[str, Any]] = []
        self.headers: List[httpx.Headers] = []

    def methods(self) -> List[str]:
        return [body["method"] for body in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        self.headers.append(request.headers)

        if body["method"] == "tools/list":
            if self.list_responses:
                return self.list_responses.pop(0)
            return httpx.Response(200, text=sse_body(tools_payload(self.tools, body["id"])))

        if self.call_response is not None:
            return self.call_response(body)
        return httpx.Response(200, text=sse_body(result_payload(self.call_result, body["id"])))


def make_client(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> McpHttpClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kwargs.setdefault("sleep", RecordingSleep())
    return McpHttpClient("http://provider.test/sse", http_client=http_client, **kwargs)


LINEAR_WIRE_TOOLS = [
    {
        "name": "LINEAR_LIST_ISSUES",
        "description": "List issues in Linear",
        "inputSchema": {"type": "object", "properties": {"first": {"type": "integer"}}},
    },
    {
        "name": "LINEAR_CREATE_ISSUE",
        "description": "Create a new issue in Linear",
        "inputSchema": {"type": "object", "properties": {"title": {"type": "string"}}},
    },
    {
        "name": "LINEAR_LIST_PROJECTS",
        "description": "List projects in the workspace",
    },
]


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file"""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        openai_base_url="https://llm.test/v1",
        llm_timeout_seconds=5.0,
    )


@pytest.fixture
def linear_wire_tools():
    return [dict(tool) for tool in LINEAR_WIRE_TOOLS]


@pytest.fixture
def linear_catalog(linear_wire_tools):
    """Linear catalog in discovery order"""
    return ToolCatalog.from_wire("linear", linear_wire_tools)


@pytest.fixture
def issue_tools():
    return [
        ToolDescriptor(name="LIST_ISSUES", description="List issues"),
        ToolDescriptor(name="CREATE_ISSUE", description="Create an issue"),
    ]


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
