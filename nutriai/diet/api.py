# -*- coding: utf-8 -*-
"""Diet — API endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user
from ..config import settings
from ..profiles.storage import get_profile
from .models import (
    AnalyzeFoodRequest,
    DailySummary,
    FoodAnalysis,
    Meal,
    MealCreateRequest,
    MealListResponse,
    PortionUpdateRequest,
)
from .portions import meal_name
from .storage import (
    create_meal,
    daily_summary,
    delete_meal,
    get_meal,
    goals_for,
    list_meals,
    update_portions,
)
from .vision import (
    ImagePayloadError,
    VisionConfigError,
    VisionRateLimitError,
    decode_image_payload,
    recognize_food,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/diet", tags=["Diet"])


def analyze_image(user_id: str, image_data: Optional[str], *, save: bool = False) -> FoodAnalysis:
    """Decode, recognise and optionally store a meal photo.

    Raises HTTPException with the Portuguese messages the app displays.
    """
    try:
        image_bytes, mime = decode_image_payload(image_data, settings.max_image_bytes)
    except ImagePayloadError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        result, model_name = recognize_food(image_bytes=image_bytes, image_mime=mime)
    except VisionConfigError as exc:
        logger.error("food analysis unavailable: %s", exc)
        raise HTTPException(status_code=503, detail="Serviço de análise temporariamente indisponível") from exc
    except VisionRateLimitError as exc:
        raise HTTPException(status_code=429, detail="Limite de requisições excedido. Tente novamente em alguns instantes.") from exc
    except RuntimeError as exc:
        logger.error("food analysis failed: %s", exc)
        raise HTTPException(status_code=502, detail="Erro ao analisar a imagem") from exc

    analysis = FoodAnalysis(
        success=True,
        foods=result.foods,
        totals=result.totals,
        is_estimated=True,
        notes=result.notes or " ".join(result.warnings),
        warnings=result.warnings,
        model=model_name,
    )
    if save and analysis.foods:
        meal = create_meal(
            user_id,
            foods=analysis.foods,
            name=meal_name(analysis.foods),
            is_estimated=True,
            notes=analysis.notes or None,
            totals=analysis.totals,
        )
        analysis.meal_id = meal.id
    return analysis


@router.post("/analyze", response_model=FoodAnalysis, summary="Analyze a meal photo")
def analyze(request: AnalyzeFoodRequest, user: dict = Depends(get_current_user)):
    return analyze_image(user["id"], request.image_data, save=request.save)


@router.post("/meals", response_model=Meal, summary="Register a meal")
def create_diet_meal(request: MealCreateRequest, user: dict = Depends(get_current_user)):
    name = request.name or (meal_name(request.foods) if request.foods else None)
    return create_meal(
        user["id"],
        foods=request.foods,
        name=name,
        meal_date=request.meal_date,
        meal_time=request.meal_time,
        is_estimated=request.is_estimated,
        notes=request.notes,
    )


@router.get("/meals", response_model=MealListResponse, summary="List my meals")
def list_diet_meals(
    day: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    limit: int = Query(default=50, ge=1, le=500),
    user: dict = Depends(get_current_user),
):
    meals = list_meals(user["id"], day=day, limit=limit)
    return MealListResponse(count=len(meals), meals=meals)


@router.get("/meals/{meal_id}", response_model=Meal, summary="Get a meal")
def get_diet_meal(meal_id: str, user: dict = Depends(get_current_user)):
    try:
        return get_meal(user["id"], meal_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Refeição não encontrada") from exc


@router.delete("/meals/{meal_id}", summary="Delete a meal")
def delete_diet_meal(meal_id: str, user: dict = Depends(get_current_user)):
    try:
        delete_meal(user["id"], meal_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Refeição não encontrada") from exc
    return {"status": "ok"}


@router.patch("/meals/{meal_id}/portions", response_model=Meal, summary="Edit portion sizes")
def edit_portions(meal_id: str, request: PortionUpdateRequest, user: dict = Depends(get_current_user)):
    edits = {p.index: p.grams for p in request.portions}
    try:
        return update_portions(user["id"], meal_id, edits)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Refeição não encontrada") from exc
    except IndexError as exc:
        raise HTTPException(status_code=400, detail=f"Índice de alimento inválido: {exc}") from exc


@router.get("/summary", response_model=DailySummary, summary="Daily nutrition summary")
def summary(
    day: Optional[str] = Query(default=None, description="YYYY-MM-DD; defaults to today (UTC)"),
    user: dict = Depends(get_current_user),
):
    target_day = day or datetime.now(timezone.utc).date().isoformat()
    goals = goals_for(get_profile(user["id"]))
    return daily_summary(user["id"], target_day, goals)
