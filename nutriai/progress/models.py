# -*- coding: utf-8 -*-
"""Progress — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class BodyMetricCreateRequest(BaseModel):
    weight: float = Field(..., gt=0, description="kg")
    bmi: Optional[float] = Field(None, gt=0, description="Computed from profile height when omitted")
    body_fat_percentage: Optional[float] = Field(None, ge=0, le=100)
    muscle_mass: Optional[float] = Field(None, ge=0)


class BodyMetric(BaseModel):
    id: str
    weight: float
    bmi: Optional[float] = None
    body_fat_percentage: Optional[float] = None
    muscle_mass: Optional[float] = None
    created_at: str


class BodyMetricListResponse(BaseModel):
    count: int
    items: List[BodyMetric]


class GoalCreateRequest(BaseModel):
    goal_name: str = Field(..., min_length=1, max_length=120)
    goal_type: str = Field(..., min_length=1, max_length=60)
    target_value: float
    current_value: Optional[float] = None
    unit: Optional[str] = Field(None, max_length=20)


class GoalProgressRequest(BaseModel):
    current_value: float


class Goal(BaseModel):
    id: str
    goal_name: str
    goal_type: str
    target_value: float
    current_value: Optional[float] = None
    unit: Optional[str] = None
    remaining: float
    completed_at: Optional[str] = None
    created_at: str


class GoalListResponse(BaseModel):
    count: int
    items: List[Goal]


class AchievementCreateRequest(BaseModel):
    achievement_name: str = Field(..., min_length=1, max_length=120)
    achievement_description: Optional[str] = None
    points: Optional[int] = Field(None, ge=0)
    progress_current: Optional[float] = Field(None, ge=0)
    progress_target: Optional[float] = Field(None, gt=0)


class AchievementProgressRequest(BaseModel):
    progress_current: float = Field(..., ge=0)
    completed: Optional[bool] = None


class Achievement(BaseModel):
    id: str
    achievement_name: str
    achievement_description: Optional[str] = None
    points: Optional[int] = None
    progress_current: Optional[float] = None
    progress_target: Optional[float] = None
    progress: Optional[int] = Field(None, description="Percent, when current and target are set")
    completed: bool = False
    completed_at: Optional[str] = None
    created_at: str


class AchievementListResponse(BaseModel):
    count: int
    items: List[Achievement]


class MonthlyStats(BaseModel):
    workouts_completed: int = 0
    calories_burned: float = 0.0
    total_hours: float = 0.0
    current_streak: int = 0
    meals_registered: int = 0
    calorie_goal_days: int = 0
    avg_protein: int = 0
    ai_analyses: int = 0


class MotivationResponse(BaseModel):
    index: int
    message: str
