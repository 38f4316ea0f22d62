# -*- coding: utf-8 -*-
"""Diet — Pydantic models."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ConfidenceLabel = Literal["alta", "média", "baixa"]


class NutritionTotals(BaseModel):
    calories: float = Field(0.0, ge=0)
    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fat: float = Field(0.0, ge=0)


class FoodItem(BaseModel):
    name: str = Field(..., min_length=1, description="Food name, e.g. 'arroz', 'maçã'")
    portion: Optional[str] = Field(None, description="Human-readable portion, e.g. '1 concha'")
    portion_grams: float = Field(100.0, ge=0, description="Estimated grams for the portion")
    calories: float = Field(0.0, ge=0)
    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fat: float = Field(0.0, ge=0)
    confidence: Optional[ConfidenceLabel] = None
    source: str = "Estimativa"


class AnalyzeFoodRequest(BaseModel):
    """Body of the ``analyze-food`` function: a data URL or raw base64 image."""

    model_config = ConfigDict(populate_by_name=True)

    image_data: Optional[str] = Field(None, alias="imageData")
    save: bool = Field(False, description="Also store the analysis as a meal")


class FoodAnalysis(BaseModel):
    success: bool = True
    foods: List[FoodItem] = []
    totals: NutritionTotals = NutritionTotals()
    is_estimated: bool = True
    notes: str = ""
    warnings: List[str] = []
    model: str = ""
    meal_id: Optional[str] = None


class VisionRawResult(BaseModel):
    foods: List[FoodItem] = []
    totals: Optional[NutritionTotals] = None
    warnings: List[str] = []
    notes: str = ""
    extra: Dict[str, object] = Field(default_factory=dict, description="Reserved for model-specific fields")

    @field_validator("warnings", mode="before")
    @classmethod
    def _coerce_warnings(cls, value: object) -> List[str]:
        """LLM outputs are often inconsistent (warnings: "..." vs ["..."])."""
        if value is None:
            return []
        if isinstance(value, str):
            v = value.strip()
            return [v] if v else []
        if isinstance(value, list):
            return [str(item).strip() for item in value if item is not None and str(item).strip()]
        s = str(value).strip()
        return [s] if s else []


class MealCreateRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    meal_date: Optional[str] = Field(None, description="ISO8601 timestamp; defaults to now")
    meal_time: Optional[str] = Field(None, description="HH:MM; defaults to now")
    foods: List[FoodItem] = Field(default_factory=list)
    is_estimated: bool = False
    notes: Optional[str] = Field(None, max_length=2000)


class Meal(BaseModel):
    id: str
    name: Optional[str] = None
    meal_date: str
    meal_time: str
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    foods: List[FoodItem] = []
    is_estimated: bool = False
    notes: Optional[str] = None
    created_at: str


class MealListResponse(BaseModel):
    count: int
    meals: List[Meal]


class PortionEdit(BaseModel):
    index: int = Field(..., ge=0)
    grams: float | str = Field(..., description="New portion in grams; unparseable values count as 0")


class PortionUpdateRequest(BaseModel):
    portions: List[PortionEdit] = Field(..., min_length=1)


class NutritionGoals(BaseModel):
    calories: float = 2200
    protein: float = 120
    carbs: float = 220
    fat: float = 60


class DailySummary(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    meal_count: int = Field(0, ge=0)
    totals: NutritionTotals
    goals: NutritionGoals
    progress: Dict[str, float]
    remaining_calories: float
