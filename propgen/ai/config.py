from dataclasses import dataclass

from propgen.core.config import settings


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    temperature: float
    ambient_credential: str | None


def load_ai_config() -> AIConfig:
    provider = settings.ai_provider
    ambient = settings.openai_api_key if provider == "openai" else settings.gemini_api_key
    return AIConfig(
        provider=provider,
        model=settings.ai_model,
        temperature=settings.ai_temperature,
        ambient_credential=_clean(ambient),
    )


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    # Unset build-time env vars can leak through as the literal string "undefined".
    if not value or value == "undefined":
        return None
    return value


def resolve_credential(override: str | None, ambient: str | None) -> str | None:
    return _clean(override) or _clean(ambient)
