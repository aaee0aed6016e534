"""
profiles/public.py -- Anonymous, read-only view of a user's profile page.

This is the one place that reads records without an authenticated owner: the
user id comes straight from the URL. It only reads, never creates a profile,
and never fails for an unknown user -- the result is just empty.
"""

from profiles.models import PublicProfile
from profiles.store import ProfileStore


def get_public_profile(store: ProfileStore, user_id: int) -> PublicProfile:
    """Collect profile, skills and experience for user_id.

    profile is None when the user has no profile row yet.
    """
    return PublicProfile(
        user_id=user_id,
        profile=store.find_profile(user_id),
        skills=store.list_skills(user_id),
        experience=store.list_experience(user_id),
    )
