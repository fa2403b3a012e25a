from typing import Protocol


class AIClient(Protocol):
    async def generate(self, prompt: str, *, system_instruction: str) -> str: ...


class Generator(Protocol):
    """Turns a job posting plus knowledge-base context into proposal text."""

    async def generate(self, prompt: str, context: str, credential: str | None) -> str: ...
