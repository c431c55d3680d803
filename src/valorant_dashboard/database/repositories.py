import json
from pathlib import Path
from typing import Optional
from pydantic import ValidationError
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from valorant_dashboard.config.logging import get_logger
from valorant_dashboard.models.session import SessionData, now_ms
from valorant_dashboard.models.stored_session import StoredSession

logger = get_logger("session.store")


class SessionStore:
    """Durable sessionId -> SessionData storage with lazy TTL expiry."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, session_id: str, data: SessionData, max_age_seconds: int) -> None:
        expires_at = now_ms() + max_age_seconds * 1000
        payload = json.dumps(data.to_payload())

        row = await self.session.get(StoredSession, session_id)
        if row is None:
            self.session.add(StoredSession(id=session_id, data=payload, expires_at=expires_at))
        else:
            row.data = payload
            row.expires_at = expires_at
        await self.session.commit()

    async def get(self, session_id: str) -> Optional[SessionData]:
        result = await self.session.execute(
            select(StoredSession).where(StoredSession.id == session_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None

        if row.expires_at <= now_ms():
            await self.delete(session_id)
            return None

        try:
            return SessionData.model_validate(json.loads(row.data))
        except (ValueError, ValidationError) as e:
            logger.warning("Stored session payload is invalid", error=str(e))
            return None

    async def delete(self, session_id: str) -> None:
        await self.session.execute(
            delete(StoredSession).where(StoredSession.id == session_id)
        )
        await self.session.commit()

    async def cleanup_expired(self) -> int:
        result = await self.session.execute(
            delete(StoredSession).where(StoredSession.expires_at <= now_ms())
        )
        await self.session.commit()
        return result.rowcount or 0

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(StoredSession))
        return result.scalar_one()

    async def migrate_from_json(self, json_path: Path) -> int:
        """Import a legacy ``[{id, data, expiresAt}]`` file into an empty table.

        Expired entries are skipped and the file is renamed to ``*.migrated``
        so the import only ever runs once.
        """
        if not json_path.exists():
            return 0

        # Only migrate into an empty table to avoid duplicates
        if await self.count() > 0:
            return 0

        try:
            entries = json.loads(json_path.read_text(encoding="utf-8"))
            if not isinstance(entries, list):
                raise ValueError("expected a list of sessions")
        except ValueError as e:
            logger.warning("Failed to parse legacy session file, skipping migration",
                           path=str(json_path), error=str(e))
            return 0

        now = now_ms()
        imported = 0
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            session_id = entry.get("id")
            expires_at = entry.get("expiresAt")
            data = entry.get("data")
            if not session_id or not isinstance(expires_at, (int, float)) or expires_at <= now:
                continue
            if await self.session.get(StoredSession, session_id) is not None:
                continue
            self.session.add(StoredSession(
                id=session_id,
                data=json.dumps(data),
                expires_at=int(expires_at),
            ))
            imported += 1
        await self.session.commit()

        json_path.rename(json_path.with_name(json_path.name + ".migrated"))
        logger.info("Migrated legacy sessions", count=imported, source=str(json_path))
        return imported
