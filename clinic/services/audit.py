from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from clinic.models import AuditEvent, User

logger = logging.getLogger(__name__)


def log_action(*, user: Optional[User], action: str, object_type: Optional[str] = None,
               object_id: Optional[str] = None, detail: Optional[Dict[str, Any]] = None) -> Optional[AuditEvent]:
    """Record an audit event; failures are logged and never reach the caller."""
    try:
        return AuditEvent.objects.create(
            user=user if isinstance(user, User) else None,
            action=action,
            object_type=object_type,
            object_id=str(object_id) if object_id is not None else None,
            detail=detail or {},
        )
    except Exception as exc:
        logger.warning('Unable to record audit event %s: %s', action, exc)
        return None
