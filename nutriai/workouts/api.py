# -*- coding: utf-8 -*-
"""Workouts — API endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user
from .models import (
    Workout,
    WorkoutCompleteRequest,
    WorkoutCompleteResponse,
    WorkoutCreateRequest,
    WorkoutHistoryResponse,
    WorkoutListResponse,
)
from .storage import (
    complete_workout,
    completion_message,
    create_workout,
    delete_workout,
    get_workout,
    list_history,
    list_workouts,
)

router = APIRouter(prefix="/api/workouts", tags=["Workouts"])


@router.post("", response_model=Workout, summary="Create a workout template")
def create(request: WorkoutCreateRequest, user: dict = Depends(get_current_user)):
    return create_workout(
        user["id"],
        name=request.name,
        exercises=request.exercises,
        description=request.description,
        category=request.category,
        difficulty=request.difficulty,
        duration_minutes=request.duration_minutes,
        estimated_calories=request.estimated_calories,
    )


@router.get("", response_model=WorkoutListResponse, summary="List my workouts")
def list_all(category: Optional[str] = Query(default=None), user: dict = Depends(get_current_user)):
    workouts = list_workouts(user["id"], category=category)
    return WorkoutListResponse(count=len(workouts), workouts=workouts)


@router.get("/history", response_model=WorkoutHistoryResponse, summary="Completed sessions")
def history(limit: int = Query(default=50, ge=1, le=500), user: dict = Depends(get_current_user)):
    items = list_history(user["id"], limit=limit)
    return WorkoutHistoryResponse(count=len(items), items=items)


@router.get("/{workout_id}", response_model=Workout, summary="Get a workout")
def get_one(workout_id: str, user: dict = Depends(get_current_user)):
    try:
        return get_workout(user["id"], workout_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Treino não encontrado") from exc


@router.delete("/{workout_id}", summary="Delete a workout")
def delete(workout_id: str, user: dict = Depends(get_current_user)):
    try:
        delete_workout(user["id"], workout_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Treino não encontrado") from exc
    return {"status": "ok"}


@router.post("/{workout_id}/complete", response_model=WorkoutCompleteResponse, summary="Finish a workout")
def complete(workout_id: str, request: WorkoutCompleteRequest, user: dict = Depends(get_current_user)):
    try:
        entry = complete_workout(user["id"], workout_id, request.elapsed_seconds)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Treino não encontrado") from exc
    return WorkoutCompleteResponse(message=completion_message(entry.calories_burned), history=entry)
