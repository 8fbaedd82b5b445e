"""In-app notification dispatch."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from ..db.supabase import get_supabase_client


class NotificationDispatcher:
    """Records notifications in the ``notifications`` table, or logs them when no database is set up."""

    def __init__(self, client: Any = None) -> None:
        self.client = client if client is not None else get_supabase_client()
        self.sent: list[dict] = []

    def notify(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        data: Optional[dict] = None,
    ) -> bool:
        """Send one notification. Returns False instead of raising when delivery fails."""
        record = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "type": notification_type,
            "title": title,
            "message": message,
            "data": data or {},
            "is_read": False,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        if self.client is None:
            logging.info(f"Notification for {user_id} [{notification_type}]: {title}")
            self.sent.append(record)
            return True

        try:
            self.client.table("notifications").insert(record).execute()
        except Exception as exc:
            logging.warning(f"Failed to store notification for user {user_id}: {exc}")
            return False
        self.sent.append(record)
        return True
