from app.models.profile import Profile
from app.models.subscription import VipSubscription
from app.models.payment import Payment
from app.models.audit_log import AuditLog
from app.models.rate_limit import RateLimitWindow
