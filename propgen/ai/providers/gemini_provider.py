from __future__ import annotations

from google import genai
from google.genai import types


class GeminiProvider:
    def __init__(self, model: str, api_key: str, temperature: float = 0.7):
        self._model = model
        self._temperature = temperature
        self._client = genai.Client(api_key=api_key)

    async def generate(self, prompt: str, *, system_instruction: str) -> str:
        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=self._temperature,
            ),
        )
        return response.text or ""
