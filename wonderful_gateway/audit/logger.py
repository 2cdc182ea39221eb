"""
Immutable audit trail for gateway operations.

Every checkout attempt, provider callback and order state change gets an
append-only audit log entry with:
  - Order ID (which order, when known)
  - Action (what happened)
  - Details (provider ids, raw statuses, HTTP codes)
  - Timestamp (UTC)

This is the operator-facing record. Callers never pass the merchant key or
an encrypted payload in `details`.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from wonderful_gateway.models.order import AuditLog

logger = logging.getLogger("wonderful_gateway.audit")


async def log_event(
    session: AsyncSession,
    action: str,
    order_id: Optional[int] = None,
    details: Optional[dict[str, Any]] = None,
) -> AuditLog:
    """
    Create an immutable audit log entry.

    Args:
        session: Database session.
        action: What happened (e.g. "checkout_redirect_created", "webhook_applied").
        order_id: The order this event relates to, if resolved.
        details: Arbitrary context (serialized to JSON).

    Returns:
        The created AuditLog record.
    """
    entry = AuditLog(
        order_id=order_id,
        action=action,
        details=json.dumps(details, default=str) if details else None,
        timestamp=datetime.now(timezone.utc),
    )
    session.add(entry)
    logger.info(
        "AUDIT | order=%s action=%s | %s",
        order_id if order_id is not None else "-",
        action,
        json.dumps(details, default=str)[:200] if details else "",
    )
    return entry
