"""
Available models endpoint.

Returns the models installed on the local inference server and the remote
models offered when a remote credential is configured.
"""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from llynx.api.deps import AppSettings, LocalBackend, RemoteBackend
from llynx.core.exceptions import UpstreamError
from llynx.core.logger import logger

router = APIRouter()


@router.get("")
async def list_local_models(backend: LocalBackend):
    """List models installed on the local inference server."""
    try:
        models = await backend.list_models()
    except UpstreamError as e:
        logger.warning(f"Failed to list local models: {e.message}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    return JSONResponse({"models": models}, headers={"Cache-Control": "no-store"})


@router.get("/remote")
async def list_remote_models(backend: RemoteBackend, settings: AppSettings):
    """List remote models, if a remote credential is configured."""
    available = settings.has_remote_credential
    models = await backend.list_models() if available else []
    return JSONResponse(
        {"available": available, "models": models},
        headers={"Cache-Control": "no-store"},
    )
