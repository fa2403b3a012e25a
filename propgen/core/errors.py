from __future__ import annotations


class ProposalError(RuntimeError):
    code = "proposal_error"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code


class GenerationError(ProposalError):
    """Raised by the generation collaborator; shown to the user verbatim."""

    code = "generation_error"


class MissingCredential(GenerationError):
    code = "missing_credential"


class GenerationFailure(GenerationError):
    code = "generation_failure"


class PersistenceFailure(ProposalError):
    code = "persistence_failure"


class DuplicateCheckFailure(ProposalError):
    # Never reaches the user: the detector treats it as "no duplicate".
    code = "duplicate_check_failure"
