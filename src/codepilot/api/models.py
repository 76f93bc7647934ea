# API request/response models
# Pydantic models for API endpoint data validation

from pydantic import BaseModel, Field, field_validator


class QueryRequest(BaseModel):
    """Request model for the query endpoint."""

    query: str = Field(..., min_length=1, description="Natural language request")

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Ensure query is not empty."""
        if not v.strip():
            raise ValueError("Query cannot be empty")
        return v


class QueryResponse(BaseModel):
    """Response model for the query endpoint."""

    text: str
    state: str = Field(..., description="Routing state: routed, general or degraded")
    provider: str | None = Field(None, description="Provider the query was routed to")
    kind: str = Field(..., description="Outcome kind, e.g. executed or no_match")


class ProviderStatusResponse(BaseModel):
    """Connection snapshot for one provider."""

    name: str
    display_name: str
    status: str
    reason: str | None = None
    tools: list[str] = Field(default_factory=list)
    error_count: int = 0
    throttled: bool = False


class ConnectionTestResponse(BaseModel):
    """Result of a provider connectivity self-test."""

    provider: str
    message: str
    status: str
    reason: str | None = None
    tool_count: int = 0
