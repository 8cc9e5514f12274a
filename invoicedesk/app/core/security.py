"""Bearer-token identity for InvoiceDesk.

Tokens are issued by the external identity provider and carry ``sub``, ``email``
and ``name`` claims signed with the shared ``SECRET_KEY``. ``create_access_token``
mirrors what the provider issues so local tooling and tests can mint tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from pydantic import BaseModel

from invoicedesk.app.core.settings import get_settings


class Identity(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


def create_access_token(
    subject: str | int,
    *,
    email: Optional[str] = None,
    name: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    settings = get_settings()
    expire_delta = timedelta(
        minutes=expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    expire = datetime.now(timezone.utc) + expire_delta
    payload: Dict[str, Any] = {"sub": str(subject), "exp": expire}
    if email is not None:
        payload["email"] = email
    if name is not None:
        payload["name"] = name
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def decode_access_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as exc:
        raise ValueError("Expired token") from exc
    except jwt.InvalidTokenError as exc:
        raise ValueError("Invalid token") from exc


def identity_from_token(token: str) -> Identity:
    payload = decode_access_token(token)
    subject = payload.get("sub")
    if not subject:
        raise ValueError("Token has no subject")
    return Identity(id=str(subject), email=payload.get("email"), name=payload.get("name"))
