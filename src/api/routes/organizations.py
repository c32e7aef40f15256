"""Organization, webhook key and membership endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import get_app_settings, get_store
from src.api.schemas import (
    CreateOrganizationRequest,
    ErrorResponse,
    InviteMemberRequest,
    MemberListResponse,
    MemberResponse,
    OrganizationResponse,
)
from src.core.config import Settings
from src.core.models import Organization
from src.core.organizations import (
    OrganizationNotFound,
    create_organization,
    invite_member,
    regenerate_api_key,
    webhook_url,
)
from src.db.store import AlarmStore

router = APIRouter()


def _to_response(organization: Organization, settings: Settings) -> OrganizationResponse:
    return OrganizationResponse(
        id=organization.id,
        name=organization.name,
        owner_id=organization.owner_id,
        webhook_api_key=organization.webhook_api_key,
        webhook_url=webhook_url(organization, settings.webhook_base_url),
        created_at=organization.created_at,
    )


@router.post("/organizations", response_model=OrganizationResponse, status_code=201)
async def create_new_organization(
    request: CreateOrganizationRequest,
    store: AlarmStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> OrganizationResponse:
    organization = await create_organization(
        store,
        name=request.name,
        owner_id=request.owner_id,
        owner_email=request.owner_email,
    )
    return _to_response(organization, settings)


@router.get(
    "/organizations/{organization_id}",
    response_model=OrganizationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_organization_detail(
    organization_id: str,
    store: AlarmStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> OrganizationResponse:
    organization = await store.get_organization(organization_id)
    if organization is None:
        raise HTTPException(status_code=404, detail="Organization not found")
    return _to_response(organization, settings)


@router.post(
    "/organizations/{organization_id}/api-key",
    response_model=OrganizationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def regenerate_organization_api_key(
    organization_id: str,
    store: AlarmStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> OrganizationResponse:
    try:
        organization = await regenerate_api_key(store, organization_id)
    except OrganizationNotFound:
        raise HTTPException(status_code=404, detail="Organization not found")
    return _to_response(organization, settings)


@router.get(
    "/organizations/{organization_id}/members",
    response_model=MemberListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_organization_members(
    organization_id: str,
    store: AlarmStore = Depends(get_store),
) -> MemberListResponse:
    if await store.get_organization(organization_id) is None:
        raise HTTPException(status_code=404, detail="Organization not found")
    members = await store.list_members(organization_id)
    return MemberListResponse(
        members=[MemberResponse.model_validate(m.model_dump()) for m in members],
        total=len(members),
    )


@router.post(
    "/organizations/{organization_id}/members",
    response_model=MemberResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
)
async def invite_organization_member(
    organization_id: str,
    request: InviteMemberRequest,
    store: AlarmStore = Depends(get_store),
) -> MemberResponse:
    try:
        member = await invite_member(store, organization_id, user_email=request.user_email)
    except OrganizationNotFound:
        raise HTTPException(status_code=404, detail="Organization not found")
    return MemberResponse.model_validate(member.model_dump())
