# -*- coding: utf-8 -*-
"""Profiles — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..auth.security import get_current_user
from .models import Profile, ProfileUpsertRequest
from .storage import get_profile, upsert_profile

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("", response_model=Profile, summary="Get my profile")
def read_profile(user: dict = Depends(get_current_user)):
    profile = get_profile(user["id"])
    if not profile:
        raise HTTPException(status_code=404, detail="Perfil não encontrado")
    return Profile(**profile)


@router.put("", response_model=Profile, summary="Create or update my profile")
def write_profile(request: ProfileUpsertRequest, user: dict = Depends(get_current_user)):
    fields = request.model_dump(exclude_unset=True, mode="json")
    return Profile(**upsert_profile(user["id"], fields))
