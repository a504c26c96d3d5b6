"""
auth/audit.py -- Audit trail for account and session changes.

Every state change the core makes (session created or deleted, email or
password changed) emits one AuditEvent on the "sessiongate.audit" logger.
The actor is always the email of the user the change was made for, taken
before the change is applied.

The event rides on the log record as the "audit" extra attribute so a
structured handler can pick it up; the formatted message stays human-readable
for the plain logfile.

Never put secrets (passwords, hashes, tokens) into details.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field

logger = logging.getLogger("sessiongate.audit")

NEW_SESSION = "new session"
SESSION_DELETED = "session deleted"
CHANGED_EMAIL = "changed email"
CHANGED_PASSWORD = "changed password"


@dataclass(frozen=True)
class AuditEvent:
    actor: str
    action: str
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        record = asdict(self)
        details = record.pop("details")
        record.update(details)
        return record


def record(actor: str, action: str, **details) -> AuditEvent:
    """Emit and return an audit event."""
    event = AuditEvent(actor=actor, action=action, details=details)
    if details:
        suffix = " ".join(f"{k}={v}" for k, v in details.items())
        logger.info("%s: %s (%s)", actor, action, suffix, extra={"audit": event.to_dict()})
    else:
        logger.info("%s: %s", actor, action, extra={"audit": event.to_dict()})
    return event
