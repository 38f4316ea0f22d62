# -*- coding: utf-8 -*-
"""Progress — API endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user
from ..profiles.storage import get_profile
from .models import (
    Achievement,
    AchievementCreateRequest,
    AchievementListResponse,
    AchievementProgressRequest,
    BodyMetric,
    BodyMetricCreateRequest,
    BodyMetricListResponse,
    Goal,
    GoalCreateRequest,
    GoalListResponse,
    GoalProgressRequest,
    MonthlyStats,
    MotivationResponse,
)
from .motivation import pick_message
from .stats import WINDOW_DAYS, bmi, monthly_stats
from .storage import (
    activity_since,
    add_body_metric,
    complete_goal,
    create_achievement,
    create_goal,
    list_achievements,
    list_active_goals,
    list_body_metrics,
    update_achievement_progress,
    update_goal_progress,
)

router = APIRouter(prefix="/api/progress", tags=["Progress"])


@router.post("/body-metrics", response_model=BodyMetric, summary="Record body metrics")
def record_body_metric(request: BodyMetricCreateRequest, user: dict = Depends(get_current_user)):
    value = request.bmi
    if value is None:
        profile = get_profile(user["id"]) or {}
        value = bmi(request.weight, profile.get("height"))
    return add_body_metric(
        user["id"],
        weight=request.weight,
        bmi=value,
        body_fat_percentage=request.body_fat_percentage,
        muscle_mass=request.muscle_mass,
    )


@router.get("/body-metrics", response_model=BodyMetricListResponse, summary="List body metrics")
def body_metrics(limit: int = Query(default=50, ge=1, le=500), user: dict = Depends(get_current_user)):
    items = list_body_metrics(user["id"], limit=limit)
    return BodyMetricListResponse(count=len(items), items=items)


@router.post("/goals", response_model=Goal, summary="Create a goal")
def new_goal(request: GoalCreateRequest, user: dict = Depends(get_current_user)):
    return create_goal(user["id"], **request.model_dump())


@router.get("/goals", response_model=GoalListResponse, summary="Active goals (at most three)")
def goals(user: dict = Depends(get_current_user)):
    items = list_active_goals(user["id"])
    return GoalListResponse(count=len(items), items=items)


@router.patch("/goals/{goal_id}", response_model=Goal, summary="Update goal progress")
def goal_progress(goal_id: str, request: GoalProgressRequest, user: dict = Depends(get_current_user)):
    try:
        return update_goal_progress(user["id"], goal_id, request.current_value)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Meta não encontrada") from exc


@router.post("/goals/{goal_id}/complete", response_model=Goal, summary="Complete a goal")
def finish_goal(goal_id: str, user: dict = Depends(get_current_user)):
    try:
        return complete_goal(user["id"], goal_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Meta não encontrada") from exc


@router.post("/achievements", response_model=Achievement, summary="Create an achievement")
def new_achievement(request: AchievementCreateRequest, user: dict = Depends(get_current_user)):
    return create_achievement(user["id"], request.model_dump())


@router.get("/achievements", response_model=AchievementListResponse, summary="List achievements")
def achievements(user: dict = Depends(get_current_user)):
    items = list_achievements(user["id"])
    return AchievementListResponse(count=len(items), items=items)


@router.patch("/achievements/{achievement_id}", response_model=Achievement, summary="Update achievement progress")
def achievement_progress(
    achievement_id: str,
    request: AchievementProgressRequest,
    user: dict = Depends(get_current_user),
):
    try:
        return update_achievement_progress(
            user["id"], achievement_id, request.progress_current, request.completed
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Conquista não encontrada") from exc


@router.get("/monthly", response_model=MonthlyStats, summary="Last 30 days of activity")
def monthly(user: dict = Depends(get_current_user)):
    now = datetime.now(timezone.utc)
    since = (now - timedelta(days=WINDOW_DAYS)).isoformat().replace("+00:00", "Z")
    activity = activity_since(user["id"], since)
    return monthly_stats(activity["workouts"], activity["meals"], now.date())


@router.get("/motivation", response_model=MotivationResponse, summary="A motivational message")
def motivation(
    previous: Optional[int] = Query(default=None, ge=0, description="Index shown last time"),
    user: dict = Depends(get_current_user),  # noqa: ARG001
):
    index, message = pick_message(previous)
    return MotivationResponse(index=index, message=message)
