from __future__ import annotations

from dataclasses import dataclass

from propgen.ai.prompt import SCORE_PREFIX


@dataclass(frozen=True)
class ParsedProposal:
    score: str | None
    body: str


def parse(generated_text: str) -> ParsedProposal:
    """Split a leading ``Match Score:`` line from the proposal body.

    Purely textual. A score line without a line break after it is left in the
    body and no score is reported.
    """
    if not generated_text.startswith(SCORE_PREFIX):
        return ParsedProposal(score=None, body=generated_text)

    head, sep, rest = generated_text.partition("\n")
    if not sep:
        return ParsedProposal(score=None, body=generated_text)

    lines = rest.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    return ParsedProposal(score=head.strip(), body="\n".join(lines))
