"""HTTP client for OpenAI-compatible chat completion services.

Covers the two generative-AI capabilities the extraction core needs:
structured JSON output for text prompts and free-text answers for
single-image vision prompts.
"""

from __future__ import annotations

from typing import Any, TypeVar, cast

import httpx
from aiolimiter import AsyncLimiter
from pydantic import BaseModel, ValidationError

from social_recipe_extractor.llm.exceptions import (
    LLMConfigurationError,
    LLMRateLimitError,
    LLMRefusalError,
    LLMResponseError,
    LLMTimeoutError,
    LLMUnavailableError,
    LLMValidationError,
)
from social_recipe_extractor.llm.models import (
    ChatRequest,
    ChatResponse,
    LLMCompletionResult,
)
from social_recipe_extractor.observability.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class OpenAIClient:
    """Async HTTP client for an OpenAI-compatible chat completions API.

    Attributes:
        base_url: API base URL.
        model: Default text model.
        vision_model: Default model for image prompts.
        api_key: API key for bearer authentication.
        timeout: HTTP request timeout in seconds.
        max_retries: Maximum retry attempts for timeouts and connection errors.
    """

    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        vision_model: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_retries: int = 2,
        requests_per_minute: float = 500.0,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key for authentication.
            model: Default model name for text prompts.
            vision_model: Default model for image prompts (defaults to model).
            base_url: API base URL.
            timeout: HTTP request timeout in seconds (default: 30).
            max_retries: Maximum retries for transient failures (default: 2).
            requests_per_minute: Client-side request pacing (default: 500).
        """
        if requests_per_minute <= 0:
            msg = "requests_per_minute must be positive"
            raise LLMConfigurationError(msg)

        self.api_key = api_key
        self.model = model
        self.vision_model = vision_model or model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._http_client: httpx.AsyncClient | None = None
        # 1 request per (60/rpm) seconds, no initial burst
        self._rate_limiter = AsyncLimiter(1, 60.0 / requests_per_minute)

    @property
    def chat_url(self) -> str:
        """Get the chat completions endpoint URL."""
        return f"{self.base_url}/chat/completions"

    async def initialize(self) -> None:
        """Initialize the HTTP client with auth headers."""
        if self._http_client is not None:
            return

        if not self.api_key:
            msg = "OpenAI API key is not configured"
            raise LLMConfigurationError(msg)

        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            limits=httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
            ),
        )
        logger.info(
            "OpenAIClient initialized",
            model=self.model,
            vision_model=self.vision_model,
            timeout=self.timeout,
        )

    async def shutdown(self) -> None:
        """Close the HTTP client and release connections."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("OpenAIClient shutdown")

    async def _execute_with_retry(self, request: ChatRequest) -> ChatResponse:
        """Execute request with retry logic for transient failures."""
        if self._http_client is None:
            await self.initialize()

        assert self._http_client is not None

        last_exception: Exception | None = None

        for attempt in range(self.max_retries + 1):
            await self._rate_limiter.acquire()

            try:
                response = await self._http_client.post(
                    self.chat_url,
                    json=request.model_dump(exclude_none=True),
                )

                if response.status_code == 429:
                    retry_after = response.headers.get("retry-after", "60")
                    msg = f"OpenAI rate limit exceeded (429), retry after {retry_after}s"
                    raise LLMRateLimitError(msg)

                response.raise_for_status()
                return ChatResponse.model_validate(response.json())

            except httpx.TimeoutException as e:
                last_exception = e
                logger.warning(
                    "OpenAI request timeout",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    timeout=self.timeout,
                )
                if attempt < self.max_retries:
                    continue
                msg = f"OpenAI timeout after {self.timeout}s"
                raise LLMTimeoutError(msg) from e

            except httpx.HTTPStatusError as e:
                logger.error(
                    "OpenAI request failed",
                    status_code=e.response.status_code,
                    url=self.chat_url,
                )
                msg = f"OpenAI returned {e.response.status_code}"
                raise LLMResponseError(msg, status_code=e.response.status_code) from e

            except httpx.RequestError as e:
                last_exception = e
                logger.warning(
                    "OpenAI connection error",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    error=str(e),
                )
                if attempt < self.max_retries:
                    continue
                msg = f"Cannot connect to OpenAI: {e}"
                raise LLMUnavailableError(msg) from e

            except ValidationError as e:
                msg = f"Malformed chat completion payload: {e}"
                raise LLMResponseError(msg) from e

        msg = "Max retries exceeded"
        raise LLMUnavailableError(msg) from last_exception

    @staticmethod
    def _split_options(options: dict[str, Any] | None) -> tuple[float, int | None]:
        """Extract (temperature, max_tokens) from prompt options."""
        if not options:
            return 0.1, None
        return options.get("temperature", 0.1), options.get("max_tokens")

    async def generate(
        self,
        prompt: str,
        *,
        model: str | None = None,
        system: str | None = None,
        schema: type[T] | None = None,
        options: dict[str, Any] | None = None,
    ) -> LLMCompletionResult:
        """Generate a chat completion.

        Args:
            prompt: Input prompt text.
            model: Model to use (defaults to client's default model).
            system: Optional system prompt for context.
            schema: Optional Pydantic model for structured JSON output.
            options: Model-specific options (temperature, max_tokens).

        Returns:
            LLMCompletionResult with raw response and parsed output, or with
            ``refusal`` set when the model declined.

        Raises:
            LLMUnavailableError: If the service cannot be reached.
            LLMTimeoutError: If request times out.
            LLMRateLimitError: If the service returns 429.
            LLMResponseError: If the service returns an error.
            LLMValidationError: If response doesn't match schema.
        """
        use_model = model or self.model

        messages: list[dict[str, Any]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response_format: dict[str, Any] | None = None
        if schema is not None:
            response_format = {
                "type": "json_schema",
                "json_schema": {
                    "name": schema.__name__,
                    "schema": schema.model_json_schema(),
                },
            }

        temperature, max_tokens = self._split_options(options)
        request = ChatRequest(
            model=use_model,
            messages=messages,
            response_format=response_format,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        response = await self._execute_with_retry(request)
        if not response.choices:
            msg = "OpenAI returned no choices"
            raise LLMValidationError(msg)

        message = response.choices[0].message
        raw_response = message.content or ""
        usage = response.usage

        if message.refusal:
            logger.info("Model refused request", model=response.model)
            return LLMCompletionResult(
                raw_response=raw_response,
                refusal=message.refusal,
                model=response.model,
                prompt_tokens=usage.prompt_tokens if usage else None,
                completion_tokens=usage.completion_tokens if usage else None,
            )

        parsed: Any = None
        if schema is not None and raw_response:
            try:
                parsed = schema.model_validate_json(raw_response)
            except ValidationError as e:
                logger.warning(
                    "Failed to parse structured OpenAI output",
                    schema=schema.__name__,
                    error=str(e),
                    raw_response=raw_response[:500],
                )
                msg = f"Response does not match {schema.__name__} schema: {e}"
                raise LLMValidationError(msg) from e

        return LLMCompletionResult(
            raw_response=raw_response,
            parsed=parsed,
            model=response.model,
            prompt_tokens=usage.prompt_tokens if usage else None,
            completion_tokens=usage.completion_tokens if usage else None,
        )

    async def generate_structured(
        self,
        prompt: str,
        schema: type[T],
        *,
        model: str | None = None,
        system: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> T:
        """Generate structured output matching a Pydantic schema.

        Returns:
            Instance of the schema class populated from LLM response.

        Raises:
            LLMRefusalError: If the model declined.
            LLMValidationError: If no parsed output is available.
        """
        result = await self.generate(
            prompt=prompt,
            model=model,
            system=system,
            schema=schema,
            options=options,
        )

        if result.refusal:
            raise LLMRefusalError(result.refusal)

        if result.parsed is None:
            msg = "Structured generation returned no parsed result"
            raise LLMValidationError(msg)

        return cast("T", result.parsed)

    async def describe_image(
        self,
        prompt: str,
        image_url: str,
        *,
        model: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> str:
        """Send one prompt plus one image and return the raw text answer.

        Args:
            prompt: Instructions for the model.
            image_url: Public URL or ``data:image/...;base64,`` URI.
            model: Model to use (defaults to the vision model).
            options: Model-specific options (temperature, max_tokens).

        Returns:
            Response text, empty if the model returned no content.
        """
        temperature, max_tokens = self._split_options(options)
        request = ChatRequest(
            model=model or self.vision_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": image_url, "detail": "low"},
                        },
                    ],
                }
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

        response = await self._execute_with_retry(request)
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
