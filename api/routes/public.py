"""
api/routes/public.py -- Public, unauthenticated profile pages.

Routes:
  GET /api/public/{user_id}/profile  -- profile + skills + experience for any user

Intentionally public: this is the page a user shares with others. It is
read-only and goes through get_public_profile(), which never creates rows.
An unknown user id returns a null profile and empty lists, not a 404.
"""

from fastapi import APIRouter, Request

from api.models import PublicProfileResponse, RecordId
from profiles.public import get_public_profile
from profiles.store import ProfileStore

router = APIRouter()


@router.get("/public/{user_id}/profile", response_model=PublicProfileResponse)
def public_profile(request: Request, user_id: RecordId) -> PublicProfileResponse:
    store: ProfileStore = request.app.state.profile_store
    return PublicProfileResponse.from_domain(get_public_profile(store, user_id))
