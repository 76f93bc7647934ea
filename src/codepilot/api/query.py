"""Query and provider status endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ..models.routing import Provider
from ..services.coordinator import ExecutionCoordinator
from ..services.providers import get_profile
from .models import ConnectionTestResponse, ProviderStatusResponse, QueryRequest, QueryResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["query"])


async def get_coordinator(request: Request) -> ExecutionCoordinator:
    """Get the execution coordinator from app state

    Raises:
        HTTPException: If the coordinator is not initialized
    """
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise HTTPException(status_code=500, detail="Coordinator not initialized")
    return coordinator


def _parse_provider(name: str) -> Provider:
    try:
        return Provider(name.lower())
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown provider: {name}")


@router.get("/providers", response_model=list[ProviderStatusResponse], operation_id="list_providers")
async def list_providers(
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
) -> list[ProviderStatusResponse]:
    """List every provider with its connection status and discovered tools."""
    responses = []
    for state in coordinator.provider_states():
        stats = coordinator.error_stats(state.provider)
        responses.append(ProviderStatusResponse(
            name=state.provider.value,
            display_name=get_profile(state.provider).display_name,
            status=state.status.state.value,
            reason=state.status.reason,
            tools=state.tool_names,
            error_count=stats["total_errors"],
            throttled=stats["throttled"],
        ))
    return responses


@router.post(
    "/providers/{provider}/test",
    response_model=ConnectionTestResponse,
    operation_id="test_provider_connection",
)
async def test_provider_connection(
    provider: str,
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
) -> ConnectionTestResponse:
    """Run one discovery against a provider and report the result."""
    report = await coordinator.test_connection(_parse_provider(provider))
    return ConnectionTestResponse(
        provider=report.provider.value,
        message=report.message,
        status=report.state.status.state.value,
        reason=report.state.status.reason,
        tool_count=len(report.state.tools),
    )


@router.post("/query", response_model=QueryResponse, operation_id="process_query")
async def process_query(
    request: QueryRequest,
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
) -> QueryResponse:
    """Route a natural-language request and, if routed, execute one provider tool.

    Provider and LLM failures are reported in ``text``; only an unexpected
    error becomes an HTTP 500.
    """
    try:
        outcome = await coordinator.process_query(request.query)
    except Exception as e:
        logger.exception(f"Query processing failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return QueryResponse(
        text=outcome.text,
        state=outcome.decision.state.value,
        provider=outcome.provider.value if outcome.provider is not None else None,
        kind=outcome.kind.value,
    )
