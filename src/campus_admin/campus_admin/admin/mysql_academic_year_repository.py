from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Term
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AcademicTerm, AcademicYear
from .repository import AcademicYearRepository

_COLUMNS = "academic_year_id, label, start_date, end_date, is_current, created_at"


def _load_terms(cur, year_ids: list[int]) -> dict[int, list[AcademicTerm]]:
    terms: dict[int, list[AcademicTerm]] = {i: [] for i in year_ids}
    if not year_ids:
        return terms
    placeholders = ",".join(["%s"] * len(year_ids))
    cur.execute(
        f"""
        SELECT academic_year_id, name, start_date, end_date
        FROM academic_terms
        WHERE academic_year_id IN ({placeholders})
        ORDER BY start_date
        """,
        tuple(year_ids),
    )
    for r in fetchall(cur):
        terms[int(r["academic_year_id"])].append(
            AcademicTerm(name=Term(r["name"]), start_date=r["start_date"], end_date=r["end_date"])
        )
    return terms


def _hydrate(cur, rows: list[dict]) -> list[AcademicYear]:
    terms = _load_terms(cur, [int(r["academic_year_id"]) for r in rows])
    return [
        AcademicYear(
            academic_year_id=int(r["academic_year_id"]),
            label=r["label"],
            start_date=r["start_date"],
            end_date=r["end_date"],
            is_current=bool(r["is_current"]),
            terms=tuple(terms[int(r["academic_year_id"])]),
            created_at=r.get("created_at"),
        )
        for r in rows
    ]


def _write_terms(cur, year: AcademicYear, academic_year_id: int) -> None:
    cur.execute("DELETE FROM academic_terms WHERE academic_year_id=%s", (academic_year_id,))
    for term in year.terms:
        cur.execute(
            "INSERT INTO academic_terms(academic_year_id, name, start_date, end_date) VALUES(%s,%s,%s,%s)",
            (academic_year_id, term.name.value, term.start_date, term.end_date),
        )


class MySQLAcademicYearRepository(AcademicYearRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, academic_year_id: int) -> Optional[AcademicYear]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM academic_years WHERE academic_year_id=%s", (int(academic_year_id),))
            row = fetchone(cur)
            return _hydrate(cur, [row])[0] if row else None

    def get_by_label(self, label: str) -> Optional[AcademicYear]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM academic_years WHERE label=%s", (label,))
            row = fetchone(cur)
            return _hydrate(cur, [row])[0] if row else None

    def list_all(self) -> Sequence[AcademicYear]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM academic_years ORDER BY start_date DESC")
            return _hydrate(cur, fetchall(cur))

    def add(self, year: AcademicYear) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if year.is_current:
                cur.execute("UPDATE academic_years SET is_current=0 WHERE is_current=1")
            cur.execute(
                "INSERT INTO academic_years(label, start_date, end_date, is_current) VALUES(%s,%s,%s,%s)",
                (year.label, year.start_date, year.end_date, int(year.is_current)),
            )
            academic_year_id = int(cur.lastrowid)
            _write_terms(cur, year, academic_year_id)
            return academic_year_id

    def update(self, year: AcademicYear) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            if year.is_current:
                cur.execute(
                    "UPDATE academic_years SET is_current=0 WHERE is_current=1 AND academic_year_id<>%s",
                    (int(year.academic_year_id),),
                )
            cur.execute(
                """
                UPDATE academic_years
                SET label=%s, start_date=%s, end_date=%s, is_current=%s
                WHERE academic_year_id=%s
                """,
                (year.label, year.start_date, year.end_date, int(year.is_current), int(year.academic_year_id)),
            )
            _write_terms(cur, year, int(year.academic_year_id))

    def delete(self, academic_year_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM academic_years WHERE academic_year_id=%s", (int(academic_year_id),))
            return cur.rowcount > 0
