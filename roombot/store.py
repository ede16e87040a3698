from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from roombot.config import CHANNEL_TYPE
from roombot.models import UserSession


def _to_document(row: UserSession) -> Dict[str, Any]:
    return {
        "_id": row.id,
        "user_key": row.user_key,
        "context": row.context or {},
        "type": row.type,
    }


def _context_user_id(context: Dict[str, Any]) -> Optional[str]:
    user = context.get("user")
    if isinstance(user, dict) and user.get("id") is not None:
        return str(user["id"])
    return None


class ConversationStore:
    """
    Per-chat session documents: {_id, user_key, context, type}.
    Created on first contact, overwritten every turn, never deleted.
    Concurrent turns for the same chat are last-write-wins.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, user_key: str) -> Optional[Dict[str, Any]]:
        db = self.session_factory()
        try:
            row = db.get(UserSession, str(user_key))
            return _to_document(row) if row else None
        finally:
            db.close()

    def save(self, user_key: str, context: Dict[str, Any], channel: str = CHANNEL_TYPE) -> Dict[str, Any]:
        user_key = str(user_key)
        db = self.session_factory()
        try:
            row = db.get(UserSession, user_key)
            if not row:
                row = UserSession(id=user_key, user_key=user_key, type=channel)
                db.add(row)

            row.context = dict(context or {})
            row.user_id = _context_user_id(row.context)
            db.commit()
            db.refresh(row)
            return _to_document(row)
        finally:
            db.close()

    def find_by_user_id(self, user_id: str, channel: str = CHANNEL_TYPE) -> Optional[Dict[str, Any]]:
        """Secondary lookup by context.user.id (booking user -> chat)."""
        db = self.session_factory()
        try:
            row = db.execute(
                select(UserSession)
                .where(UserSession.user_id == str(user_id), UserSession.type == channel)
                .limit(1)
            ).scalar_one_or_none()
            return _to_document(row) if row else None
        finally:
            db.close()
