import hmac
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import jwt

from app.core.config import settings

ALGO = "HS256"


@dataclass(frozen=True)
class Identity:
    id: str
    email: str | None = None


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def decode_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.SUPABASE_JWT_SECRET,
        algorithms=[ALGO],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.token_issuer,
    )


def identity_from_claims(payload: dict) -> Identity:
    sub = payload.get("sub")
    if not sub:
        raise ValueError("token without sub")
    # Raises ValueError for anything that is not a UUID
    user_id = str(UUID(str(sub)))
    email = payload.get("email") or None
    return Identity(id=user_id, email=email)


def create_access_token(sub: str, email: str | None = None, minutes: int = 60) -> str:
    """Mint a token shaped like the identity provider's. Used by tests and local tooling."""
    exp = now_utc() + timedelta(minutes=minutes)
    payload = {
        "sub": sub,
        "aud": settings.JWT_AUDIENCE,
        "iss": settings.token_issuer,
        "role": "authenticated",
        "exp": exp,
    }
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm=ALGO)


def verify_service_key(presented: str | None) -> bool:
    if not presented:
        return False
    expected = settings.SUPABASE_SERVICE_ROLE_KEY.encode("utf-8")
    return hmac.compare_digest(expected, presented.encode("utf-8"))
