from __future__ import annotations

import logging
import time

from propgen.ai.config import AIConfig, load_ai_config
from propgen.ai.factory import get_ai_client
from propgen.ai.prompt import build_system_instruction
from propgen.core.errors import GenerationError, GenerationFailure

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_TEXT = "No response generated."


class ProposalGenerator:
    """Generation collaborator backed by the configured provider.

    The credential is resolved on every call (override first, then the
    ambient key) so a key supplied by the user only lives for one request.
    """

    def __init__(self, cfg: AIConfig | None = None):
        self._cfg = cfg

    async def generate(self, prompt: str, context: str, credential: str | None) -> str:
        cfg = self._cfg or load_ai_config()
        started = time.perf_counter()
        try:
            client = get_ai_client(credential, cfg)
            text = await client.generate(prompt, system_instruction=build_system_instruction(context))
        except GenerationError:
            raise
        except Exception as exc:
            logger.warning(
                "generation_failed provider=%s model=%s error=%s",
                cfg.provider,
                cfg.model,
                exc.__class__.__name__,
            )
            raise GenerationFailure(str(exc) or exc.__class__.__name__) from exc

        logger.debug(
            "generation_complete provider=%s model=%s duration_ms=%d",
            cfg.provider,
            cfg.model,
            int((time.perf_counter() - started) * 1000),
        )
        return text or EMPTY_RESPONSE_TEXT


def get_generator() -> ProposalGenerator:
    return ProposalGenerator()
