"""Identity dependencies for resolving the acting owner."""

from typing import Optional

from fastapi import Depends, Header, HTTPException

from invoicedesk.app.core.security import Identity, identity_from_token


def get_current_identity(authorization: str | None = Header(default=None)) -> Optional[Identity]:
    # No header means single-tenant mode; a malformed or bad token is rejected.
    if authorization is None:
        return None
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = authorization.split(" ", 1)[1]
    try:
        return identity_from_token(token)
    except ValueError:
        raise HTTPException(status_code=401, detail="Not authenticated")


def owner_scope(identity: Optional[Identity] = Depends(get_current_identity)) -> Optional[str]:
    """Owner id every query and write is scoped to; ``None`` when unscoped."""
    return identity.id if identity else None
