from __future__ import annotations
import aiosqlite
from datetime import datetime
from typing import List
from ..domain.models import ActionEvent


class SQLiteRepository:
    """Append-only log of commands sent to the bridge."""

    def __init__(self, path: str) -> None:
        self._path = path

    async def init(self) -> None:
        async with aiosqlite.connect(self._path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS actions (
                    ts_utc TEXT NOT NULL,
                    command TEXT NOT NULL,
                    target_id TEXT NOT NULL,
                    reason TEXT NOT NULL,
                    scene_name TEXT
                )
                """
            )
            await db.execute("CREATE INDEX IF NOT EXISTS idx_actions_ts ON actions(ts_utc)")
            await db.commit()

    async def insert_action(self, a: ActionEvent) -> None:
        async with aiosqlite.connect(self._path) as db:
            await db.execute(
                "INSERT INTO actions(ts_utc,command,target_id,reason,scene_name) VALUES (?,?,?,?,?)",
                (a.ts_utc.isoformat(), a.command, a.target_id, a.reason, a.scene_name),
            )
            await db.commit()

    async def query_actions(self, start_ts: str, end_ts: str, limit: int) -> List[ActionEvent]:
        async with aiosqlite.connect(self._path) as db:
            cur = await db.execute(
                """
                SELECT ts_utc,command,target_id,reason,scene_name
                FROM actions
                WHERE ts_utc >= ? AND ts_utc <= ?
                ORDER BY ts_utc DESC, rowid DESC
                LIMIT ?
                """,
                (start_ts, end_ts, limit),
            )
            rows = await cur.fetchall()
        out: list[ActionEvent] = []
        for ts, command, target, reason, scene_name in rows:
            out.append(
                ActionEvent(
                    ts_utc=datetime.fromisoformat(ts),
                    command=command,
                    target_id=target,
                    reason=reason,
                    scene_name=scene_name,
                )
            )
        return list(reversed(out))
