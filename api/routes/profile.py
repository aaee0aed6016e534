"""
api/routes/profile.py -- The authenticated user's own profile.

Routes:
  GET /api/profile   -- fetch (and lazily create) the caller's profile
  PUT /api/profile   -- set title / bio / location; omitted fields are untouched

The owner id always comes from get_current_user_id(); there is no way to name
another user's profile here.
"""

from fastapi import APIRouter, Depends, Request

from api.models import ProfileResponse, ProfileUpdate
from auth.dependencies import get_current_user_id
from profiles.store import ProfileStore

router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
def get_profile(request: Request, user_id: int = Depends(get_current_user_id)) -> ProfileResponse:
    """Return the caller's profile, creating a blank one on first access."""
    store: ProfileStore = request.app.state.profile_store
    return ProfileResponse.from_domain(store.get_or_create_profile(user_id))


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    request: Request,
    body: ProfileUpdate,
    user_id: int = Depends(get_current_user_id),
) -> ProfileResponse:
    store: ProfileStore = request.app.state.profile_store
    profile = store.upsert_profile(user_id, body.model_dump(exclude_unset=True))
    return ProfileResponse.from_domain(profile)
