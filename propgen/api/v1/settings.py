from fastapi import APIRouter, Depends

from propgen.ai.config import load_ai_config, resolve_credential
from propgen.core.security import override_credential, require_session
from propgen.schemas.auth import CredentialStatusResponse
from propgen.store.models import Session

router = APIRouter()


@router.get("/settings/credential", response_model=CredentialStatusResponse)
def credential_status(
    credential: str | None = Depends(override_credential),
    _: Session = Depends(require_session),
):
    cfg = load_ai_config()
    return CredentialStatusResponse(
        provider=cfg.provider,
        model=cfg.model,
        ambient_configured=cfg.ambient_credential is not None,
        override_supplied=credential is not None,
        ready=resolve_credential(credential, cfg.ambient_credential) is not None,
    )
