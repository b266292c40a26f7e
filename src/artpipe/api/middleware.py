"""Request guards: API key authentication and upload size capping."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

if TYPE_CHECKING:
    from fastapi import UploadFile

    from artpipe.config import Settings

_bearer_scheme = HTTPBearer(auto_error=False)

_READ_CHUNK_SIZE = 64 * 1024


def get_settings_from_request(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


async def verify_api_key(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> None:
    """Check the Bearer token against the configured API key.

    With ARTPIPE_API_KEY unset every request passes; otherwise requests need
    'Authorization: Bearer <key>'.
    """
    expected = get_settings_from_request(request).api_key
    if expected is None:
        return

    supplied = b"" if credentials is None else credentials.credentials.encode()
    if not secrets.compare_digest(supplied, expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def read_upload_capped(upload: UploadFile, limit: int) -> bytes:
    """Read an uploaded file, refusing anything larger than ``limit`` bytes.

    The decoder does no bounds checking of its own, so this is the only cap
    on how much data reaches it.
    """
    chunks: list[bytes] = []
    total = 0
    while chunk := await upload.read(_READ_CHUNK_SIZE):
        total += len(chunk)
        if total > limit:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Upload exceeds the {limit} byte limit",
            )
        chunks.append(chunk)
    if total == 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file")
    return b"".join(chunks)
