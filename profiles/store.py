"""
profiles/store.py -- SQLAlchemy-backed persistence for profiles, skills and experience.

Uses SQLAlchemy Core (not ORM) so the dataclasses in profiles/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. ProfileStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers.

Ownership: every method takes user_id first. Reads filter on it; every
mutation puts both the record id AND user_id in the WHERE clause of a single
statement, so there is no window between "is this yours?" and "change it".
A foreign or missing id simply matches zero rows.

Concurrency:
  endorse_skill() is one UPDATE ... SET endorsements = endorsements + 1. The
  database serializes concurrent increments; a read-modify-write in Python
  would lose updates.

  profiles.user_id is UNIQUE. get_or_create_profile() inserts when no row
  exists and treats an IntegrityError as "a concurrent request created it
  first", then re-reads. Two simultaneous first reads therefore yield one row.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ProfileStore("sqlite:///skillfolio.db")
    profile = store.get_or_create_profile(user_id)
    skill = store.create_skill(user_id, {"name": "Python", "level": "expert"})
    store.endorse_skill(user_id, skill.id)
    store.close()
"""

import logging
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, UniqueConstraint
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from core.database import create_db_engine
from core.errors import NotFound
from profiles.models import (
    EXPERIENCE_FIELDS,
    PROFILE_FIELDS,
    SKILL_FIELDS,
    Experience,
    Profile,
    Skill,
)

logger = logging.getLogger("skillfolio.profiles")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_profiles = Table(
    "profiles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False),
    Column("title", String(200), nullable=False, server_default=""),
    Column("bio", Text, nullable=False, server_default=""),
    Column("location", String(200), nullable=False, server_default=""),
    UniqueConstraint("user_id", name="uq_profile_user"),
)

_skills = Table(
    "skills",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("name", String(100), nullable=False),
    Column("level", String(50), nullable=False, server_default=""),
    Column("endorsements", Integer, nullable=False, server_default="0"),
)

_experience = Table(
    "experience",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("role", String(200), nullable=False),
    Column("company", String(200), nullable=False),
    Column("start_date", String(32), nullable=False, server_default=""),
    Column("end_date", String(32), nullable=False, server_default=""),
    Column("description", Text, nullable=False, server_default=""),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _allowed(fields: dict, allow_list: tuple[str, ...]) -> dict:
    """Keep only allow-listed keys. None is stored as an empty string."""
    return {k: (v if v is not None else "") for k, v in fields.items() if k in allow_list}


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ProfileStore:
    """Repository for Profile, Skill and Experience records, scoped by owner."""

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = create_db_engine(db_url)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def find_profile(self, user_id: int) -> Optional[Profile]:
        """Return the user's profile, or None if it was never created. Never writes."""
        with self.engine.connect() as conn:
            row = conn.execute(_profiles.select().where(_profiles.c.user_id == user_id)).fetchone()
        return _row_to_profile(row) if row is not None else None

    def get_or_create_profile(self, user_id: int) -> Profile:
        """Return the user's profile, creating a blank one on first access."""
        with self.engine.connect() as conn:
            self._ensure_profile(conn, user_id)
            row = conn.execute(_profiles.select().where(_profiles.c.user_id == user_id)).fetchone()
        return _row_to_profile(row)

    def upsert_profile(self, user_id: int, fields: dict) -> Profile:
        """Set the supplied profile fields, creating the profile if needed.

        Only title, bio and location are written; anything else in fields is
        ignored. Fields not present keep their current value.
        """
        values = _allowed(fields, PROFILE_FIELDS)
        with self.engine.connect() as conn:
            self._ensure_profile(conn, user_id)
            if values:
                conn.execute(_profiles.update().where(_profiles.c.user_id == user_id).values(**values))
                conn.commit()
            row = conn.execute(_profiles.select().where(_profiles.c.user_id == user_id)).fetchone()
        return _row_to_profile(row)

    def _ensure_profile(self, conn: Connection, user_id: int) -> None:
        """Insert a blank profile row unless one exists. Safe under concurrent callers."""
        # first() closes the cursor, so no read statement is pending when the
        # caller writes on this connection.
        exists = conn.execute(_profiles.select().where(_profiles.c.user_id == user_id)).first()
        if exists is not None:
            return
        try:
            conn.execute(_profiles.insert().values(user_id=user_id, title="", bio="", location=""))
            conn.commit()
            logger.info("Created profile for user id=%d", user_id)
        except IntegrityError:
            # Lost the race to a concurrent first access; its row is the profile.
            conn.rollback()

    # ------------------------------------------------------------------
    # Skills
    # ------------------------------------------------------------------

    def list_skills(self, user_id: int) -> list[Skill]:
        """Return the user's skills in creation order."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _skills.select().where(_skills.c.user_id == user_id).order_by(_skills.c.id)
            ).fetchall()
        return [_row_to_skill(r) for r in rows]

    def get_skill(self, user_id: int, skill_id: int) -> Optional[Skill]:
        """Return the skill if it exists AND belongs to user_id, else None."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _skills.select().where((_skills.c.id == skill_id) & (_skills.c.user_id == user_id))
            ).fetchone()
        return _row_to_skill(row) if row is not None else None

    def create_skill(self, user_id: int, fields: dict) -> Skill:
        """Insert a skill owned by user_id with zero endorsements."""
        values = _allowed(fields, SKILL_FIELDS)
        with self.engine.connect() as conn:
            result = conn.execute(_skills.insert().values(**values, user_id=user_id, endorsements=0))
            conn.commit()
            skill_id = result.inserted_primary_key[0]
            row = conn.execute(_skills.select().where(_skills.c.id == skill_id)).fetchone()
        return _row_to_skill(row)

    def delete_skill(self, user_id: int, skill_id: int) -> bool:
        """Delete the skill if user_id owns it.

        Returns True if a row was deleted. A missing or foreign id is a no-op
        returning False -- callers treat both outcomes as success.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _skills.delete().where((_skills.c.id == skill_id) & (_skills.c.user_id == user_id))
            )
            conn.commit()
        return result.rowcount > 0

    def endorse_skill(self, user_id: int, skill_id: int) -> Skill:
        """Add exactly one endorsement to an owned skill and return it.

        Raises NotFound (and changes nothing) if no skill with skill_id is
        owned by user_id.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _skills.update()
                .where((_skills.c.id == skill_id) & (_skills.c.user_id == user_id))
                .values(endorsements=_skills.c.endorsements + 1)
            )
            if result.rowcount == 0:
                conn.rollback()
                raise NotFound("Skill not found.")
            conn.commit()
        skill = self.get_skill(user_id, skill_id)
        if skill is None:
            # Deleted by its owner between the increment and this read.
            raise NotFound("Skill not found.")
        return skill

    # ------------------------------------------------------------------
    # Experience
    # ------------------------------------------------------------------

    def list_experience(self, user_id: int) -> list[Experience]:
        """Return the user's experience entries in creation order."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _experience.select().where(_experience.c.user_id == user_id).order_by(_experience.c.id)
            ).fetchall()
        return [_row_to_experience(r) for r in rows]

    def create_experience(self, user_id: int, fields: dict) -> Experience:
        """Insert an experience entry owned by user_id."""
        values = _allowed(fields, EXPERIENCE_FIELDS)
        with self.engine.connect() as conn:
            result = conn.execute(_experience.insert().values(**values, user_id=user_id))
            conn.commit()
            exp_id = result.inserted_primary_key[0]
            row = conn.execute(_experience.select().where(_experience.c.id == exp_id)).fetchone()
        return _row_to_experience(row)

    def delete_experience(self, user_id: int, experience_id: int) -> bool:
        """Delete the entry if user_id owns it. Missing or foreign ids are a no-op."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _experience.delete().where((_experience.c.id == experience_id) & (_experience.c.user_id == user_id))
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_profile(row) -> Profile:
    return Profile(
        id=row.id,
        user_id=row.user_id,
        title=row.title or "",
        bio=row.bio or "",
        location=row.location or "",
    )


def _row_to_skill(row) -> Skill:
    return Skill(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        level=row.level or "",
        endorsements=row.endorsements,
    )


def _row_to_experience(row) -> Experience:
    return Experience(
        id=row.id,
        user_id=row.user_id,
        role=row.role,
        company=row.company,
        start_date=row.start_date or "",
        end_date=row.end_date or "",
        description=row.description or "",
    )
