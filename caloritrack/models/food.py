"""Food recognition result models."""

from pydantic import BaseModel, Field
from typing import Optional, List

from caloritrack.models.tracking import MealType


UNRECOGNIZED_FOOD_NAME = "Unrecognized food"


class FoodAnalysis(BaseModel):
    """Nutrition estimate returned by the recognition service."""

    food_name: str = UNRECOGNIZED_FOOD_NAME
    calories: float = Field(0, ge=0)
    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0)
    fat: float = Field(0, ge=0)
    fiber: float = Field(0, ge=0)
    ingredients: List[str] = []
    health_tips: List[str] = []
    confidence_score: float = Field(0, ge=0, le=1)
    raw_response: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.raw_response is not None


class RecognitionRequest(BaseModel):
    """Photo submitted for recognition."""

    image_base64: str
    prompt: Optional[str] = None
    meal_type: MealType = "snack"
