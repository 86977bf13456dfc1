from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.errors import AccessDenied, AuthRequired
from app.core.security import Identity, decode_token, identity_from_claims, verify_service_key
from app.db.session import get_db
from app.schemas.entitlements import Entitlement
from app.services.entitlements import Deny, authorize, resolve_entitlement

bearer = HTTPBearer(auto_error=False)


def get_current_identity(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> Identity:
    if creds is None or not creds.credentials:
        raise AuthRequired("No token")
    try:
        payload = decode_token(creds.credentials)
        return identity_from_claims(payload)
    except (JWTError, ValueError):
        raise AuthRequired("Invalid token")


def get_entitlement(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Entitlement:
    return resolve_entitlement(db, identity.id)


def enforce(entitlement: Entitlement, required_role: str | None = None, required_plan: str | None = None) -> Entitlement:
    decision = authorize(entitlement, required_role=required_role, required_plan=required_plan)
    if isinstance(decision, Deny):
        raise AccessDenied(decision.reason.value, decision.message)
    return decision.entitlement


def require_access(role: str | None = None, plan: str | None = None):
    """Dependency factory gating a route on role and/or plan."""

    def dependency(entitlement: Entitlement = Depends(get_entitlement)) -> Entitlement:
        return enforce(entitlement, required_role=role, required_plan=plan)

    return dependency


def require_service(x_service_key: str | None = Header(default=None)) -> None:
    if not verify_service_key(x_service_key):
        raise AuthRequired("Invalid service credential")
