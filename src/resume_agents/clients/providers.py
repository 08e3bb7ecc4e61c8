"""Provider registry and router.

Model ids are mapped to a wire *family* through an ordered prefix table;
the first matching rule wins and anything unmatched falls through to the
OpenAI-compatible default. The registry carries per-model metadata (cost
tier, quota fallback) for the models the application actually assigns.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlencode

from resume_agents.errors import ConfigurationError

GROQ_ENDPOINT = "https://api.groq.com/openai/v1/chat/completions"
OPENAI_ENDPOINT = "https://api.openai.com/v1/chat/completions"
GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class ProviderFamily(str, Enum):
    CHAT_MESSAGE = "ChatMessage"  # messages array + bearer token
    SINGLE_CONTENT = "SingleContent"  # single text part + key in URL


@dataclass(frozen=True)
class ProviderRule:
    prefix: str
    family: ProviderFamily
    endpoint_template: str
    credential_env_var: str


PROVIDER_RULES: tuple[ProviderRule, ...] = (
    ProviderRule("gemini", ProviderFamily.SINGLE_CONTENT, GEMINI_ENDPOINT, "GEMINI_API_KEY"),
    ProviderRule("llama", ProviderFamily.CHAT_MESSAGE, GROQ_ENDPOINT, "GROQ_API_KEY"),
    ProviderRule("mixtral", ProviderFamily.CHAT_MESSAGE, GROQ_ENDPOINT, "GROQ_API_KEY"),
    ProviderRule("openai/gpt-oss", ProviderFamily.CHAT_MESSAGE, GROQ_ENDPOINT, "GROQ_API_KEY"),
)

DEFAULT_RULE = ProviderRule("", ProviderFamily.CHAT_MESSAGE, OPENAI_ENDPOINT, "OPENAI_API_KEY")


def match_rule(model_id: str, rules: tuple[ProviderRule, ...] = PROVIDER_RULES) -> ProviderRule:
    """Return the first rule whose prefix matches ``model_id``."""
    for rule in rules:
        if model_id.startswith(rule.prefix):
            return rule
    return DEFAULT_RULE


@dataclass(frozen=True)
class ProviderModel:
    id: str
    tier: str  # "light", "mid", "high", "premium"
    family: ProviderFamily
    endpoint_template: str
    credential_env_var: str
    fallback_model_id: str | None = None


def _model(model_id: str, tier: str, fallback: str | None = None) -> ProviderModel:
    rule = match_rule(model_id)
    return ProviderModel(
        id=model_id,
        tier=tier,
        family=rule.family,
        endpoint_template=rule.endpoint_template,
        credential_env_var=rule.credential_env_var,
        fallback_model_id=fallback,
    )


MODEL_REGISTRY: dict[str, ProviderModel] = {
    m.id: m
    for m in (
        _model("llama-3.3-70b-versatile", "mid"),
        _model("llama-3.1-8b-instant", "light"),
        _model("mixtral-8x7b-32768", "mid"),
        _model("openai/gpt-oss-120b", "premium"),
        _model("gemini-2.0-flash", "high", fallback="llama-3.3-70b-versatile"),
        _model("gemini-1.5-flash", "high", fallback="llama-3.3-70b-versatile"),
        _model("gpt-4o", "premium"),
        _model("gpt-4o-mini", "light"),
    )
}


@dataclass(frozen=True)
class ResolvedProvider:
    model_id: str
    family: ProviderFamily
    endpoint: str
    credential: str

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.family is ProviderFamily.CHAT_MESSAGE:
            headers["Authorization"] = f"Bearer {self.credential}"
        return headers


class ProviderRouter:
    """Resolves a model id to a wire family, endpoint, and credential.

    Credentials are snapshotted once at construction and never re-read.
    """

    def __init__(
        self,
        credentials: Mapping[str, str] | None = None,
        *,
        rules: tuple[ProviderRule, ...] = PROVIDER_RULES,
        registry: Mapping[str, ProviderModel] = MODEL_REGISTRY,
    ):
        keys = {r.credential_env_var for r in rules} | {DEFAULT_RULE.credential_env_var}
        source = os.environ if credentials is None else credentials
        self._credentials = {k: source[k] for k in keys if source.get(k)}
        self.rules = rules
        self.registry = registry

    def resolve(self, model_id: str) -> ResolvedProvider:
        rule = match_rule(model_id, self.rules)
        credential = self._credentials.get(rule.credential_env_var)
        if not credential:
            raise ConfigurationError(rule.credential_env_var)

        endpoint = rule.endpoint_template.format(model=model_id)
        if rule.family is ProviderFamily.SINGLE_CONTENT:
            endpoint = f"{endpoint}?{urlencode({'key': credential})}"
        return ResolvedProvider(
            model_id=model_id,
            family=rule.family,
            endpoint=endpoint,
            credential=credential,
        )

    def family_of(self, model_id: str) -> ProviderFamily:
        return match_rule(model_id, self.rules).family

    def fallback_for(self, model_id: str) -> str | None:
        """Fallback model id for quota errors, only if it crosses families."""
        model = self.registry.get(model_id)
        if model is None or not model.fallback_model_id:
            return None
        if self.family_of(model.fallback_model_id) is self.family_of(model_id):
            return None
        return model.fallback_model_id
