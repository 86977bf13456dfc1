from uuid import UUID

from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog

ENTITY_PAYMENT = "payment"
ENTITY_SUBSCRIPTION = "vip_subscription"
AUDIT_ENTITY_TYPES = {ENTITY_PAYMENT, ENTITY_SUBSCRIPTION}


def audit(db: Session, actor_user_id: str | None, entity_type: str, entity_id: str, action: str, data: dict | None = None) -> AuditLog:
    """Queue an audit row in the current transaction; it is written when the caller commits."""
    if entity_type not in AUDIT_ENTITY_TYPES:
        raise ValueError(f"unknown audit entity type '{entity_type}'")
    row = AuditLog(
        actor_user_id=UUID(str(actor_user_id)) if actor_user_id else None,
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        data=data or {},
    )
    db.add(row)
    return row
