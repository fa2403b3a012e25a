from fastapi import APIRouter, Depends

from propgen.core.errors import PersistenceFailure
from propgen.store.db import Store, get_store

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application and its store.")
def health_check(store: Store = Depends(get_store)):
    try:
        store.execute("SELECT 1")
    except PersistenceFailure:
        return {"status": "degraded", "store": "unavailable"}
    return {"status": "healthy", "store": "ok"}
