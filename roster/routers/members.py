from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from roster.db.models import Account
from roster.models.schemas import (
    Action,
    ApiResponse,
    Member,
    MemberCreate,
    MemberReplace,
    MemberUpdate,
    envelope,
)
from roster.routers.deps import current_account, get_member_service, require_role
from roster.services.member_service import MemberService

router = APIRouter(prefix="/members", tags=["members"], dependencies=[Depends(current_account)])


@router.get("", response_model=ApiResponse[list[Member]])
def list_members(
    svc: MemberService = Depends(get_member_service),
    offset: int = Query(0, ge=0),
    limit: int | None = Query(None, ge=1, le=100),
    q: str | None = Query(None, max_length=100),
):
    page = svc.list_members(offset=offset, limit=limit, q=q)
    message = f"{len(page.items)} of {page.total} members"
    return envelope(Action.read, message, page.items)


@router.get("/{member_id}", response_model=ApiResponse[Member])
def get_member(member_id: int, svc: MemberService = Depends(get_member_service)):
    return envelope(Action.read, "Member found", svc.get_member(member_id))


@router.post("", response_model=ApiResponse[Member], status_code=status.HTTP_201_CREATED)
def create_member(body: MemberCreate, svc: MemberService = Depends(get_member_service)):
    member = svc.create_member(body.model_dump())
    return envelope(Action.insert, "Member created", member)


@router.put("/{member_id}", response_model=ApiResponse[Member])
def replace_member(member_id: int, body: MemberReplace, svc: MemberService = Depends(get_member_service)):
    member = svc.replace_member(member_id, body.model_dump())
    return envelope(Action.update, "Member replaced", member)


@router.patch("/{member_id}", response_model=ApiResponse[Member])
def update_member(member_id: int, body: MemberUpdate, svc: MemberService = Depends(get_member_service)):
    member = svc.update_member(member_id, body.model_dump(exclude_unset=True))
    return envelope(Action.update, "Member updated", member)


@router.delete("/{member_id}", response_model=ApiResponse[bool])
def delete_member(
    member_id: int,
    svc: MemberService = Depends(get_member_service),
    _admin: Account = Depends(require_role("admin")),
):
    return envelope(Action.delete, "Member deleted", svc.delete_member(member_id))
