"""
api/routes/experience.py -- The authenticated user's work history.

Routes:
  GET    /api/experience                  -- list own entries
  POST   /api/experience                  -- add an entry
  DELETE /api/experience/{experience_id}  -- remove an own entry; unknown ids are a no-op

Entries cannot be edited; delete and re-create instead.
"""

from fastapi import APIRouter, Depends, Request

from api.models import ExperienceCreate, ExperienceResponse, RecordId, SuccessResponse
from auth.dependencies import get_current_user_id
from profiles.store import ProfileStore

router = APIRouter()


@router.get("/experience", response_model=list[ExperienceResponse])
def list_experience(request: Request, user_id: int = Depends(get_current_user_id)) -> list[ExperienceResponse]:
    store: ProfileStore = request.app.state.profile_store
    return [ExperienceResponse.from_domain(e) for e in store.list_experience(user_id)]


@router.post("/experience", response_model=ExperienceResponse)
def create_experience(
    request: Request,
    body: ExperienceCreate,
    user_id: int = Depends(get_current_user_id),
) -> ExperienceResponse:
    store: ProfileStore = request.app.state.profile_store
    return ExperienceResponse.from_domain(store.create_experience(user_id, body.model_dump()))


@router.delete("/experience/{experience_id}", response_model=SuccessResponse)
def delete_experience(
    request: Request,
    experience_id: RecordId,
    user_id: int = Depends(get_current_user_id),
) -> SuccessResponse:
    store: ProfileStore = request.app.state.profile_store
    store.delete_experience(user_id, experience_id)
    return SuccessResponse()
