"""Async generation client over the two provider wire families."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from resume_agents.clients.providers import ProviderFamily, ProviderRouter, ResolvedProvider
from resume_agents.errors import GenerationError, ParseError
from resume_agents.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

QUOTA_STATUSES = frozenset({429})
MAX_ATTEMPTS = 2  # original call + at most one quota fallback

SchemaT = TypeVar("SchemaT", bound=BaseModel)


@dataclass(frozen=True)
class GenerationRequest:
    model_id: str
    system_instructions: str
    user_content: str
    temperature: float = 0.4
    max_tokens: int = 4000
    response_format: Literal["json", "text"] = "json"


@dataclass
class GenerationResult:
    """Response text plus parsed JSON (json format only) and usage."""

    raw: str
    parsed: Any = None
    model_id: str = ""
    input_tokens: int = 0
    output_tokens: int = 0


def build_payload(req: GenerationRequest, provider: ResolvedProvider) -> dict:
    """Translate a request into the family's wire body."""
    if provider.family is ProviderFamily.SINGLE_CONTENT:
        config: dict[str, Any] = {
            "temperature": req.temperature,
            "maxOutputTokens": req.max_tokens,
        }
        if req.response_format == "json":
            config["responseMimeType"] = "application/json"
        return {
            "contents": [{"parts": [{"text": f"{req.system_instructions}\n\n{req.user_content}"}]}],
            "generationConfig": config,
        }

    payload: dict[str, Any] = {
        "model": provider.model_id,
        "messages": [
            {"role": "system", "content": req.system_instructions},
            {"role": "user", "content": req.user_content},
        ],
        "temperature": req.temperature,
        "max_tokens": req.max_tokens,
    }
    if req.response_format == "json":
        payload["response_format"] = {"type": "json_object"}
    return payload


def extract_text(family: ProviderFamily, data: dict) -> str:
    """Pull the generated text out of a family's response body."""
    try:
        if family is ProviderFamily.SINGLE_CONTENT:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        else:
            text = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValueError(f"unexpected response shape: {str(data)[:200]}") from exc
    if not isinstance(text, str):
        raise ValueError("unexpected response shape: content is not text")
    return text


def extract_usage(family: ProviderFamily, data: dict) -> tuple[int, int]:
    if family is ProviderFamily.SINGLE_CONTENT:
        usage = data.get("usageMetadata") or {}
        return usage.get("promptTokenCount", 0), usage.get("candidatesTokenCount", 0)
    usage = data.get("usage") or {}
    return usage.get("prompt_tokens", 0), usage.get("completion_tokens", 0)


def _error_body(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return data["error"].get("message") or response.text
    return response.text


class LLMClient:
    """Async generation client with bounded quota fallback.

    A 429 from a SingleContent model that has a cross-family fallback in
    the registry gets exactly one more attempt on the fallback model; every
    other non-2xx status is raised as GenerationError immediately.
    """

    def __init__(
        self,
        router: ProviderRouter | None = None,
        *,
        timeout: float | None = None,
        max_retries: int = 3,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.router = router or ProviderRouter()
        self.max_retries = max_retries
        self.http = http_client or httpx.AsyncClient(timeout=timeout or 120.0)
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    def fork(self) -> LLMClient:
        """Client sharing the connection pool and router, with its own token log."""
        return LLMClient(self.router, max_retries=self.max_retries, http_client=self.http)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _post(self, provider: ResolvedProvider, payload: dict) -> httpx.Response:
        """Make the HTTP call, retrying transport-level failures only."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(min=1, max=10),
            reraise=True,
        ):
            with attempt:
                return await self.http.post(provider.endpoint, json=payload, headers=provider.headers)
        raise AssertionError("unreachable: AsyncRetrying reraises the last error")

    async def generate(self, req: GenerationRequest) -> GenerationResult:
        model_id = req.model_id
        for attempt in range(1, MAX_ATTEMPTS + 1):
            provider = self.router.resolve(model_id)
            logger.debug("LLM call: model=%s family=%s attempt=%d", model_id, provider.family.value, attempt)
            try:
                response = await self._post(provider, build_payload(req, provider))
            except httpx.TransportError:
                logger.error("LLM call failed", exc_info=True)
                raise

            if response.is_success:
                return self._finish(req, provider, response)

            fallback = None
            if (
                attempt < MAX_ATTEMPTS
                and response.status_code in QUOTA_STATUSES
                and provider.family is ProviderFamily.SINGLE_CONTENT
            ):
                fallback = self.router.fallback_for(model_id)
            if fallback is None:
                raise GenerationError(response.status_code, _error_body(response))

            logger.warning(
                "%s rate limited (%d), falling back to %s",
                model_id, response.status_code, fallback,
            )
            model_id = fallback

        raise AssertionError("unreachable: attempt loop always returns or raises")

    def _finish(
        self,
        req: GenerationRequest,
        provider: ResolvedProvider,
        response: httpx.Response,
    ) -> GenerationResult:
        try:
            data = response.json()
            text = extract_text(provider.family, data)
        except ValueError as exc:
            raise GenerationError(response.status_code, str(exc)) from exc

        input_tokens, output_tokens = extract_usage(provider.family, data)
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((provider.model_id, input_tokens, output_tokens))

        result = GenerationResult(
            raw=text,
            model_id=provider.model_id,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
        if req.response_format == "json":
            result.parsed = extract_json(text)
        return result

    async def generate_text(self, req: GenerationRequest) -> str:
        result = await self.generate(req)
        return result.raw

    async def generate_model(self, req: GenerationRequest, schema: type[SchemaT]) -> SchemaT:
        """Generate JSON and validate it against ``schema``."""
        result = await self.generate(req)
        if not isinstance(result.parsed, dict):
            raise ParseError(
                f"Expected a JSON object for {schema.__name__}, got {type(result.parsed).__name__}",
                result.raw[:500],
            )
        try:
            return schema.model_validate(result.parsed)
        except PydanticValidationError as exc:
            raise ParseError(
                f"Response does not match {schema.__name__}: {exc.error_count()} error(s)",
                result.raw[:500],
            ) from exc

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary
