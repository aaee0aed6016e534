"""
API request and response models for the Skillfolio REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
profiles/models.py, which own the internal domain representation. Route
handlers map between the two.

Request models double as field allow-lists: only the fields declared here can
reach a store. Unknown body fields are dropped by Pydantic and never persisted.
"""

from typing import Annotated, Optional

from fastapi import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import User
from auth.tokens import MAX_PASSWORD_BYTES
from core.database import MAX_RECORD_ID
from profiles.models import Experience, Profile, PublicProfile, Skill

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Deliberately loose: one "@", no whitespace, a dot in the domain part.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# Path parameter for a record or user id. Out-of-range ids get a 422 instead
# of overflowing the database driver.
RecordId = Annotated[int, Path(ge=1, le=MAX_RECORD_ID)]


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /api/auth/signup."""

    name: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=255)

    @field_validator("name", "email", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        """Reject passwords bcrypt would silently truncate (limit is in bytes, not chars)."""
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
        return value


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login.

    No pattern check on email: a malformed email is just an unknown one, and
    must produce the same invalid_credentials response.
    """

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class SuccessResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True


class UserPublic(BaseModel):
    """The fields of an account that may be shown to its owner."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    avatar: str

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls(**user.public_fields())


class LoginResponse(BaseModel):
    """Response body for POST /api/auth/login."""

    model_config = ConfigDict(frozen=True)

    token: str
    user: UserPublic


# ---------------------------------------------------------------------------
# Profile / skills / experience -- request models
# ---------------------------------------------------------------------------


class ProfileUpdate(BaseModel):
    """Request body for PUT /api/profile. Every field is optional.

    Routes pass model_dump(exclude_unset=True) to the store, so omitted
    fields keep their stored value.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, max_length=200)
    bio: Optional[str] = Field(default=None, max_length=5000)
    location: Optional[str] = Field(default=None, max_length=200)


class SkillCreate(BaseModel):
    """Request body for POST /api/skills."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    level: str = Field(default="", max_length=50)


class ExperienceCreate(BaseModel):
    """Request body for POST /api/experience."""

    model_config = ConfigDict(str_strip_whitespace=True)

    role: str = Field(min_length=1, max_length=200)
    company: str = Field(min_length=1, max_length=200)
    start_date: str = Field(default="", max_length=32)
    end_date: str = Field(default="", max_length=32)
    description: str = Field(default="", max_length=5000)


# ---------------------------------------------------------------------------
# Profile / skills / experience -- response models
# ---------------------------------------------------------------------------


class ProfileResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    title: str
    bio: str
    location: str

    @classmethod
    def from_domain(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            id=profile.id,
            user_id=profile.user_id,
            title=profile.title,
            bio=profile.bio,
            location=profile.location,
        )


class SkillResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    name: str
    level: str
    endorsements: int

    @classmethod
    def from_domain(cls, skill: Skill) -> "SkillResponse":
        return cls(
            id=skill.id,
            user_id=skill.user_id,
            name=skill.name,
            level=skill.level,
            endorsements=skill.endorsements,
        )


class ExperienceResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    role: str
    company: str
    start_date: str
    end_date: str
    description: str

    @classmethod
    def from_domain(cls, exp: Experience) -> "ExperienceResponse":
        return cls(
            id=exp.id,
            user_id=exp.user_id,
            role=exp.role,
            company=exp.company,
            start_date=exp.start_date,
            end_date=exp.end_date,
            description=exp.description,
        )


class PublicProfileResponse(BaseModel):
    """Response for GET /api/public/{user_id}/profile. profile is null until created."""

    model_config = ConfigDict(frozen=True)

    profile: Optional[ProfileResponse]
    skills: list[SkillResponse] = Field(default_factory=list)
    experience: list[ExperienceResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, public: PublicProfile) -> "PublicProfileResponse":
        return cls(
            profile=ProfileResponse.from_domain(public.profile) if public.profile is not None else None,
            skills=[SkillResponse.from_domain(s) for s in public.skills],
            experience=[ExperienceResponse.from_domain(e) for e in public.experience],
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    database: str = "ok"
