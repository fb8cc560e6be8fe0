"""Metabolic budget calculations: BMR, TDEE, calorie goal and macros."""

from typing import Optional

from caloritrack.models.user import (
    Activity,
    CalculatedValues,
    Goals,
    Macros,
    Profile,
)


class NutritionCalculator:
    """Turn profile, activity and goals into a daily energy budget."""

    # Activity level multipliers
    ACTIVITY_MULTIPLIERS = {
        "sedentary": 1.2,           # Little or no exercise
        "lightly_active": 1.375,    # Light exercise 1-3 days/week
        "moderately_active": 1.55,  # Moderate exercise 3-5 days/week
        "very_active": 1.725,       # Hard exercise 6-7 days/week
        "extremely_active": 1.9,    # Very hard exercise, physical job
    }

    WEIGHT_LOSS_DEFICIT = 500
    MUSCLE_GAIN_SURPLUS = 300
    MIN_DAILY_CALORIES = 1200

    # Share of calories per macro, and kcal per gram
    MACRO_RATIOS = {"protein": 0.30, "carbs": 0.40, "fats": 0.30}
    KCAL_PER_GRAM = {"protein": 4, "carbs": 4, "fats": 9}

    @staticmethod
    def calculate_bmr(
        weight_kg: float,
        height_cm: float,
        age: int,
        gender: str,
    ) -> float:
        """
        Calculate Basal Metabolic Rate using the revised Harris-Benedict equation.

        "female" and "other" share the female coefficients.
        """
        if gender == "male":
            return 88.362 + 13.397 * weight_kg + 4.799 * height_cm - 5.677 * age
        return 447.593 + 9.247 * weight_kg + 3.098 * height_cm - 4.330 * age

    @classmethod
    def calculate_tdee(cls, bmr: float, activity_level: Optional[str]) -> float:
        """Calculate Total Daily Energy Expenditure. Unknown levels count as sedentary."""
        multiplier = cls.ACTIVITY_MULTIPLIERS.get(activity_level, cls.ACTIVITY_MULTIPLIERS["sedentary"])
        return bmr * multiplier

    @classmethod
    def calculate_daily_calorie_goal(cls, tdee: float, primary_goal: Optional[str]) -> float:
        """Apply the goal adjustment. Weight loss never drops below the floor."""
        if primary_goal == "weight_loss":
            return max(cls.MIN_DAILY_CALORIES, tdee - cls.WEIGHT_LOSS_DEFICIT)
        if primary_goal == "muscle_gain":
            return tdee + cls.MUSCLE_GAIN_SURPLUS
        return tdee

    @classmethod
    def calculate_macros(cls, daily_calories: float) -> Macros:
        """Split calories 30/40/30 into protein, carbs and fat grams."""
        grams = {
            macro: round(daily_calories * ratio / cls.KCAL_PER_GRAM[macro])
            for macro, ratio in cls.MACRO_RATIOS.items()
        }
        return Macros(**grams)

    @classmethod
    def compute_calculated_values(
        cls,
        profile: Profile,
        activity: Activity,
        goals: Goals,
    ) -> CalculatedValues:
        """
        Derive BMR, TDEE, calorie goal and macros.

        Returns an all-zero result while age, weight, height or gender are
        still missing, so callers can render before onboarding completes.
        """
        if not (profile.age and profile.current_weight and profile.height and profile.gender):
            return CalculatedValues()

        bmr = cls.calculate_bmr(profile.current_weight, profile.height, profile.age, profile.gender)
        tdee = cls.calculate_tdee(bmr, activity.level)
        daily_calories = cls.calculate_daily_calorie_goal(tdee, goals.primary_goal)

        return CalculatedValues(
            bmr=round(bmr),
            tdee=round(tdee),
            daily_calorie_goal=round(daily_calories),
            macros=cls.calculate_macros(daily_calories),
        )


# Unit conversions used by the height/weight screens
def inches_to_cm(inches: float) -> float:
    return inches * 2.54


def cm_to_inches(cm: float) -> float:
    return cm / 2.54


def lbs_to_kg(lbs: float) -> float:
    return lbs * 0.453592


def kg_to_lbs(kg: float) -> float:
    return kg / 0.453592
