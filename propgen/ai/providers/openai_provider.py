from __future__ import annotations

import os
from typing import Optional

from openai import AsyncOpenAI


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: Optional[str] = None,
        timeout_s: float = 60.0,
        temperature: float = 0.7,
    ):
        self._model = model
        self._temperature = temperature
        # Failures surface to the user as-is; the SDK must not retry behind our back.
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=(base_url or os.getenv("OPENAI_BASE_URL") or None),
            timeout=float(os.getenv("OPENAI_TIMEOUT_S", str(timeout_s))),
            max_retries=0,
        )

    async def generate(self, prompt: str, *, system_instruction: str) -> str:
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": prompt},
            ],
            temperature=self._temperature,
        )
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()
