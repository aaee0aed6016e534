"""
profiles/models.py -- Domain dataclasses for a user's public-facing profile.

These are pure data containers with zero logic. All behaviour (ownership
scoping, lazy profile creation, endorsement increments) lives in
profiles/store.py.

Every record carries user_id, the id of the account that owns it.
id is None before the record is written to the database.
"""

from dataclasses import dataclass, field
from typing import Optional

# Allow-lists: the only columns a client may set on each resource.
PROFILE_FIELDS = ("title", "bio", "location")
SKILL_FIELDS = ("name", "level")
EXPERIENCE_FIELDS = ("role", "company", "start_date", "end_date", "description")


@dataclass
class Profile:
    """Headline details for one user. At most one per user_id."""

    user_id: int
    title: str = ""
    bio: str = ""
    location: str = ""
    id: Optional[int] = None


@dataclass
class Skill:
    """A named skill with a free-text level and an endorsement counter.

    endorsements only ever goes up (see ProfileStore.endorse_skill).
    """

    user_id: int
    name: str
    level: str = ""
    endorsements: int = 0
    id: Optional[int] = None


@dataclass
class Experience:
    """One entry in a user's work history. Dates are free-form strings."""

    user_id: int
    role: str
    company: str
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    id: Optional[int] = None


@dataclass
class PublicProfile:
    """Read-only bundle served to anonymous visitors.

    profile is None when the user has never opened or saved their profile.
    """

    user_id: int
    profile: Optional[Profile] = None
    skills: list[Skill] = field(default_factory=list)
    experience: list[Experience] = field(default_factory=list)
