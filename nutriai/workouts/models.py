# -*- coding: utf-8 -*-
"""Workouts — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class Exercise(BaseModel):
    name: str = Field(..., min_length=1)
    duration: int = Field(..., ge=0, description="seconds")
    rest: int = Field(0, ge=0, description="seconds")
    reps: Optional[int] = Field(None, ge=0)
    sets: Optional[int] = Field(None, ge=0)


class WorkoutCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = None
    difficulty: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=0)
    estimated_calories: Optional[int] = Field(None, ge=0)
    exercises: List[Exercise] = Field(default_factory=list)


class Workout(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    duration_minutes: Optional[int] = None
    estimated_calories: Optional[int] = None
    exercises: List[Exercise] = []
    planned_seconds: int = 0
    created_at: str


class WorkoutListResponse(BaseModel):
    count: int
    workouts: List[Workout]


class WorkoutCompleteRequest(BaseModel):
    elapsed_seconds: int = Field(..., ge=0)


class WorkoutHistoryEntry(BaseModel):
    id: str
    workout_name: str
    duration_seconds: int
    calories_burned: float
    completed_at: str


class WorkoutCompleteResponse(BaseModel):
    status: str = "ok"
    message: str
    history: WorkoutHistoryEntry


class WorkoutHistoryResponse(BaseModel):
    count: int
    items: List[WorkoutHistoryEntry]
