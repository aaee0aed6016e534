"""
api/routes/skills.py -- The authenticated user's skills and endorsements.

Routes:
  GET    /api/skills                 -- list own skills
  POST   /api/skills                 -- add a skill (endorsements start at 0)
  DELETE /api/skills/{skill_id}      -- remove an own skill; unknown ids are a no-op
  POST   /api/skills/{skill_id}/endorse  -- +1 endorsement; 404 if not an own skill

IDOR guard: every store call receives the owner id from get_current_user_id()
together with the skill id, and the store matches on both in one statement.
A foreign skill id behaves exactly like a non-existent one.
"""

from fastapi import APIRouter, Depends, Request

from api.models import RecordId, SkillCreate, SkillResponse, SuccessResponse
from auth.dependencies import get_current_user_id
from profiles.store import ProfileStore

router = APIRouter()


@router.get("/skills", response_model=list[SkillResponse])
def list_skills(request: Request, user_id: int = Depends(get_current_user_id)) -> list[SkillResponse]:
    store: ProfileStore = request.app.state.profile_store
    return [SkillResponse.from_domain(s) for s in store.list_skills(user_id)]


@router.post("/skills", response_model=SkillResponse)
def create_skill(
    request: Request,
    body: SkillCreate,
    user_id: int = Depends(get_current_user_id),
) -> SkillResponse:
    store: ProfileStore = request.app.state.profile_store
    return SkillResponse.from_domain(store.create_skill(user_id, body.model_dump()))


@router.delete("/skills/{skill_id}", response_model=SuccessResponse)
def delete_skill(
    request: Request,
    skill_id: RecordId,
    user_id: int = Depends(get_current_user_id),
) -> SuccessResponse:
    """Delete a skill. Succeeds whether or not anything was deleted."""
    store: ProfileStore = request.app.state.profile_store
    store.delete_skill(user_id, skill_id)
    return SuccessResponse()


@router.post("/skills/{skill_id}/endorse", response_model=SkillResponse)
def endorse_skill(
    request: Request,
    skill_id: RecordId,
    user_id: int = Depends(get_current_user_id),
) -> SkillResponse:
    """Add one endorsement. NotFound (404) if the caller does not own skill_id."""
    store: ProfileStore = request.app.state.profile_store
    return SkillResponse.from_domain(store.endorse_skill(user_id, skill_id))
