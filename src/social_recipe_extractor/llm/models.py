"""LLM client data models.

Request/response models for the OpenAI-compatible chat completions API
and the internal completion result handed to callers.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class LLMCompletionResult(BaseModel):
    """Internal result from LLM completion.

    Wraps raw response with parsed structured output.
    """

    raw_response: str = Field(..., description="Raw text response from LLM")
    parsed: Any | None = Field(
        default=None,
        description="Parsed structured output if schema was provided",
    )
    refusal: str | None = Field(
        default=None,
        description="Refusal text if the model declined to answer",
    )
    model: str = Field(..., description="Model that generated response")
    prompt_tokens: int | None = Field(default=None, description="Input token count")
    completion_tokens: int | None = Field(
        default=None, description="Output token count"
    )

    model_config = {"frozen": True}


# =============================================================================
# OpenAI-compatible chat format
# =============================================================================


class ChatMessage(BaseModel):
    """Single assistant message in a chat completion response."""

    role: str = Field(..., description="Message role: system, user, or assistant")
    content: str | None = Field(default=None, description="Message content")
    refusal: str | None = Field(
        default=None,
        description="Populated instead of content when the model refuses",
    )


class ChatRequest(BaseModel):
    """Request body for the /chat/completions endpoint."""

    model: str = Field(..., description="Model name (e.g., 'gpt-4o-mini')")
    messages: list[dict[str, Any]] = Field(
        ...,
        description="Chat messages; user content may be text or content parts",
    )
    response_format: dict[str, Any] | None = Field(
        default=None,
        description="Structured output format (json_schema or json_object)",
    )
    temperature: float = Field(default=0.1, description="Sampling temperature")
    max_tokens: int | None = Field(
        default=None,
        description="Maximum tokens to generate",
    )


class ChatUsage(BaseModel):
    """Token usage from a chat completion response."""

    prompt_tokens: int = Field(default=0, description="Input token count")
    completion_tokens: int = Field(default=0, description="Output token count")
    total_tokens: int = Field(default=0, description="Total token count")


class ChatChoice(BaseModel):
    """Single choice in a chat completion response."""

    index: int = Field(default=0, description="Choice index")
    message: ChatMessage = Field(..., description="Generated message")
    finish_reason: str | None = Field(default=None, description="Completion reason")


class ChatResponse(BaseModel):
    """Response from the /chat/completions endpoint."""

    id: str = Field(default="", description="Unique response ID")
    model: str = Field(..., description="Model that generated response")
    choices: list[ChatChoice] = Field(..., description="Generated completions")
    usage: ChatUsage | None = Field(default=None, description="Token usage")
