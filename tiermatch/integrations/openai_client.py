"""OpenAI client wrapper with retry logic and Response API support."""

import json
import os
from typing import Any, Type, TypeVar

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel
from pydantic.json_schema import JsonSchemaValue
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..observability.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_MODEL = "gpt-4.1-mini"


def is_test_mode() -> bool:
    return bool(os.getenv("TIERMATCH_TEST_MODE") or os.getenv("TIERMATCH_MOCK_OPENAI"))


class OpenAIClient:
    """Wrapper for OpenAI API with retry logic and structured outputs."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: int = 60,
        max_retries: int = 3,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            model: Default model to use
            timeout: Request timeout in seconds
            max_retries: Maximum number of transport retries inside the SDK
        """
        self.test_mode = is_test_mode()
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key and not self.test_mode:
            raise ValueError("OpenAI API key must be provided or set in OPENAI_API_KEY env var")

        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries

        self.client: AsyncOpenAI | None = None
        if not self.test_mode:
            self.client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=max_retries,
            )

        logger.info("openai_client_initialized", model=model, test_mode=self.test_mode)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(OpenAIError),
        reraise=True,
    )
    async def create_response(
        self,
        input_text: str,
        response_model: Type[T],
        model: str | None = None,
        metadata: dict[str, Any] | None = None,
        max_output_tokens: int | None = None,
    ) -> tuple[T, dict[str, Any]]:
        """Create a response using OpenAI Response API with structured output.

        Args:
            input_text: Input prompt text
            response_model: Pydantic model for structured output
            model: Model to use (defaults to instance default)
            metadata: Additional metadata for the request
            max_output_tokens: Optional cap on generated tokens

        Returns:
            Tuple of (parsed response, metadata including tokens used)

        Raises:
            OpenAIError: If API call fails after retries
            RuntimeError: If called in test mode
        """
        model = model or self.model

        if self.client is None:
            raise RuntimeError("OpenAI client is disabled in test mode")

        logger.info("creating_response", model=model, input_length=len(input_text))

        try:
            schema = response_model.model_json_schema()
            self._enforce_no_extra_properties(schema)
            schema_hint = json.dumps(schema)

            completion = await self.client.responses.create(
                model=model,
                input=[
                    {
                        "role": "system",
                        "content": "Return a JSON object that follows the provided schema guidance.",
                    },
                    {"role": "user", "content": input_text},
                ],
                instructions=(
                    "Return ONLY a valid JSON object that conforms to the provided schema. "
                    "Do not add markdown, code fences, prose, or extra keys. "
                    f"Schema (JSON): {schema_hint}"
                ),
                max_output_tokens=max_output_tokens or 1024,
                metadata=metadata or {},
                text={"format": {"type": "json_object"}},
            )

            output_text = self._extract_text_from_response(completion)
            if not output_text:
                raise ValueError("No text content returned from OpenAI response")

            parsed_output = self._parse_response_json(response_model, output_text)

            usage = getattr(completion, "usage", None)
            usage_metadata = {
                "tokens_total": getattr(usage, "total_tokens", 0),
                "tokens_input": getattr(usage, "input_tokens", 0),
                "tokens_output": getattr(usage, "output_tokens", 0),
                "response_id": getattr(completion, "id", None),
                "model": getattr(completion, "model", model),
            }

            logger.info(
                "response_created",
                response_id=usage_metadata["response_id"],
                tokens_total=usage_metadata["tokens_total"],
            )

            return parsed_output, usage_metadata

        except OpenAIError as e:
            logger.error("openai_error", error=str(e), model=model, exc_info=True)
            raise

    def _parse_response_json(self, response_model: Type[T], output_text: str) -> T:
        """Parse model output into the response model with basic JSON repair."""
        try:
            return response_model.model_validate_json(output_text)
        except ValueError:
            repaired = self._repair_json(output_text)
            if repaired is None:
                raise
            return response_model.model_validate(repaired)

    @staticmethod
    def _repair_json(text: str) -> dict[str, Any] | None:
        """Best-effort JSON repair: trim to outermost braces and parse."""
        if "{" not in text or "}" not in text:
            return None
        candidate = text[text.find("{") : text.rfind("}") + 1]
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            return None

    @staticmethod
    def _extract_text_from_response(response: Any) -> str:
        """Extract concatenated text payload from a Responses API result."""
        if getattr(response, "output_text", None):
            return str(response.output_text)

        texts: list[str] = []
        for item in getattr(response, "output", []) or []:
            for content in getattr(item, "content", []) or []:
                text_val = getattr(content, "text", None)
                if text_val:
                    texts.append(str(text_val))
        if not texts:
            logger.error(
                "empty_response_output",
                status=getattr(response, "status", None),
                output_preview=str(getattr(response, "output", None))[:500],
            )
        return "".join(texts).strip()

    def _enforce_no_extra_properties(self, schema: JsonSchemaValue) -> None:
        """Ensure JSON schema objects forbid additional properties."""

        def recurse(node: Any) -> None:
            if isinstance(node, dict):
                if node.get("type") == "object":
                    node.setdefault("additionalProperties", False)
                    if node.get("properties"):
                        node["required"] = sorted(node["properties"].keys())
                for value in node.values():
                    recurse(value)
            elif isinstance(node, list):
                for item in node:
                    recurse(item)

        recurse(schema)


# Global client instance
_openai_client: OpenAIClient | None = None


def get_openai_client(config: dict[str, Any] | None = None) -> OpenAIClient:
    """Get global OpenAI client instance.

    Args:
        config: Optional configuration dict

    Returns:
        OpenAIClient instance
    """
    global _openai_client

    if _openai_client is None:
        openai_config = (config or {}).get("openai", {})
        api_key_env = openai_config.get("api_key_env", "OPENAI_API_KEY")
        _openai_client = OpenAIClient(
            api_key=os.getenv(api_key_env),
            model=openai_config.get("model", DEFAULT_MODEL),
            timeout=openai_config.get("timeout", 60),
            max_retries=openai_config.get("max_retries", 3),
        )

    return _openai_client
