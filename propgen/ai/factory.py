from propgen.ai.config import AIConfig, load_ai_config, resolve_credential
from propgen.ai.types import AIClient
from propgen.core.errors import MissingCredential

from propgen.ai.providers.gemini_provider import GeminiProvider
from propgen.ai.providers.openai_provider import OpenAIProvider

MISSING_KEY_MESSAGES = {
    "gemini": (
        "Gemini API key is missing. Set GEMINI_API_KEY on the server "
        "or supply your own key in the X-Gemini-Api-Key header."
    ),
    "openai": (
        "OpenAI API key is missing. Set OPENAI_API_KEY on the server "
        "or supply your own key in the X-Gemini-Api-Key header."
    ),
}


def get_ai_client(override_credential: str | None = None, cfg: AIConfig | None = None) -> AIClient:
    cfg = cfg or load_ai_config()
    api_key = resolve_credential(override_credential, cfg.ambient_credential)
    if not api_key:
        raise MissingCredential(MISSING_KEY_MESSAGES.get(cfg.provider, "API key is missing."))

    if cfg.provider == "gemini":
        return GeminiProvider(model=cfg.model, api_key=api_key, temperature=cfg.temperature)

    if cfg.provider == "openai":
        return OpenAIProvider(model=cfg.model, api_key=api_key, temperature=cfg.temperature)

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
