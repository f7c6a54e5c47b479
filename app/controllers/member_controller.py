"""
Controller: Member roster, observations and per-member stats.
Thin HTTP layer — delegates ALL logic to MemberService.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.core.dependencies import get_member_service
from app.core.exceptions import NotFoundError, ValidationError
from app.schemas import ObservationCreate
from app.services.member_service import MemberService

router = APIRouter(prefix="/api", tags=["Members"])


@router.get("/members")
def list_members(service: MemberService = Depends(get_member_service)):
    """Roster without ignored ids, most senior first."""
    return {"success": True, "members": service.list_members()}


@router.get("/members/{discord_user_id}")
def get_member(discord_user_id: str,
               service: MemberService = Depends(get_member_service)):
    try:
        return {"success": True, "member": service.get_member(discord_user_id)}
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/members/{discord_user_id}/observations")
def add_observation(discord_user_id: str, body: Optional[ObservationCreate] = None,
                    service: MemberService = Depends(get_member_service)):
    body = body or ObservationCreate()
    try:
        observation = service.add_observation(discord_user_id, body.text, body.author)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {
        "success": True,
        "message": "Observação adicionada com sucesso!",
        "observation": observation,
    }


@router.get("/members/{discord_user_id}/stats")
def get_member_stats(discord_user_id: str,
                     service: MemberService = Depends(get_member_service)):
    return {"success": True, "stats": service.get_stats(discord_user_id)}
