from .auth import Actor, ActorRole, AuthService
from .audit import AuditService
from .invoices import InvoiceService
from .claims import ClaimLifecycleService

__all__ = ["Actor", "ActorRole", "AuthService", "AuditService", "InvoiceService", "ClaimLifecycleService"]
