"""Shared request dependencies."""

from fastapi import Header, HTTPException


def get_owner_id(x_owner_id: str | None = Header(default=None)) -> str:
    """Owner identity supplied by the fronting auth layer."""
    if not x_owner_id or not x_owner_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_owner_id.strip()
