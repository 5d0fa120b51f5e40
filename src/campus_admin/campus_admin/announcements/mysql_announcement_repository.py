from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AnnouncementStatus, Audience, Priority
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Announcement, ReadReceipt
from .repository import AnnouncementRepository

_COLUMNS = """
    announcement_id, title, content, author_user_id, faculty_id, course_id, priority,
    target_audience, status, visible_from, visible_until, attachments, created_at
"""


def _hydrate(cur, rows: list[dict]) -> list[Announcement]:
    if not rows:
        return []
    ids = [int(r["announcement_id"]) for r in rows]
    receipts: dict[int, list[ReadReceipt]] = {i: [] for i in ids}
    cur.execute(
        f"""
        SELECT announcement_id, user_id, read_at FROM announcement_reads
        WHERE announcement_id IN ({",".join(["%s"] * len(ids))})
        ORDER BY read_at
        """,
        tuple(ids),
    )
    for r in fetchall(cur):
        receipts[int(r["announcement_id"])].append(ReadReceipt(user_id=int(r["user_id"]), read_at=r["read_at"]))

    return [
        Announcement(
            announcement_id=int(r["announcement_id"]),
            title=r["title"],
            content=r["content"],
            author_user_id=int(r["author_user_id"]),
            faculty_id=r.get("faculty_id"),
            course_id=r.get("course_id"),
            priority=Priority(r["priority"]),
            target_audience=Audience(r["target_audience"]),
            status=AnnouncementStatus(r["status"]),
            visible_from=r["visible_from"],
            visible_until=r.get("visible_until"),
            attachments=tuple(load_json(r.get("attachments"), default=[]) or []),
            read_by=tuple(receipts[int(r["announcement_id"])]),
            created_at=r.get("created_at"),
        )
        for r in rows
    ]


def _params(a: Announcement) -> tuple:
    return (
        a.title,
        a.content,
        a.author_user_id,
        a.faculty_id,
        a.course_id,
        a.priority.value,
        a.target_audience.value,
        a.status.value,
        a.visible_from,
        a.visible_until,
        dump_json(list(a.attachments)),
    )


class MySQLAnnouncementRepository(AnnouncementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, announcement_id: int) -> Optional[Announcement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM announcements WHERE announcement_id=%s", (int(announcement_id),))
            row = fetchone(cur)
            return _hydrate(cur, [row])[0] if row else None

    def add(self, announcement: Announcement) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO announcements(
                    title, content, author_user_id, faculty_id, course_id, priority, target_audience,
                    status, visible_from, visible_until, attachments
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(announcement),
            )
            return int(cur.lastrowid)

    def update(self, announcement: Announcement) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE announcements
                SET title=%s, content=%s, author_user_id=%s, faculty_id=%s, course_id=%s, priority=%s,
                    target_audience=%s, status=%s, visible_from=%s, visible_until=%s, attachments=%s
                WHERE announcement_id=%s
                """,
                _params(announcement) + (int(announcement.announcement_id),),
            )

    def delete(self, announcement_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM announcements WHERE announcement_id=%s", (int(announcement_id),))
            return cur.rowcount > 0

    def list_by(self, *, course_id: Optional[int] = None) -> Sequence[Announcement]:
        where = "WHERE course_id=%s" if course_id is not None else ""
        params: tuple = (int(course_id),) if course_id is not None else ()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM announcements {where} ORDER BY visible_from DESC, announcement_id DESC", params)
            return _hydrate(cur, fetchall(cur))

    def mark_read(self, *, announcement_id: int, user_id: int, at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO announcement_reads(announcement_id, user_id, read_at) VALUES(%s,%s,%s)",
                (int(announcement_id), int(user_id), at),
            )
