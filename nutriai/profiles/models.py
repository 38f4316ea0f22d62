# -*- coding: utf-8 -*-
"""Profiles — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..tts.models import VoiceProvider


class ProfileUpsertRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=120)
    age: Optional[int] = Field(None, ge=0, le=130)
    weight: Optional[float] = Field(None, gt=0, description="kg")
    height: Optional[float] = Field(None, gt=0, description="cm")
    fitness_goal: Optional[str] = Field(None, max_length=60)
    daily_calories_goal: Optional[float] = Field(None, gt=0)
    daily_protein_goal: Optional[float] = Field(None, gt=0)
    daily_carbs_goal: Optional[float] = Field(None, gt=0)
    daily_fat_goal: Optional[float] = Field(None, gt=0)
    daily_calories_burn_goal: Optional[float] = Field(None, gt=0)
    voice_provider: Optional[VoiceProvider] = None
    onboarding_completed: Optional[bool] = None
    avatar_url: Optional[str] = None


class Profile(BaseModel):
    id: str
    user_id: str
    name: Optional[str] = None
    age: Optional[int] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    fitness_goal: Optional[str] = None
    daily_calories_goal: Optional[float] = None
    daily_protein_goal: Optional[float] = None
    daily_carbs_goal: Optional[float] = None
    daily_fat_goal: Optional[float] = None
    daily_calories_burn_goal: Optional[float] = None
    voice_provider: Optional[VoiceProvider] = None
    onboarding_completed: bool = False
    avatar_url: Optional[str] = None
    created_at: str
