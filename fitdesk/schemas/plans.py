from marshmallow import ValidationError, fields, validate, validates_schema

from fitdesk.models.nutrition_plans import MEAL_TYPES
from fitdesk.models.training_plan import MUSCLE_GROUPS
from .base import BaseSchema, required_text

NON_NEGATIVE = validate.Range(min=0, error="Must be zero or more")


class _DateRangeMixin:
    @validates_schema
    def check_dates(self, data, **kwargs):
        start, end = data.get("start_date"), data.get("end_date")
        if start and end and end < start:
            raise ValidationError("End date must be after start date", "end_date")


class TrainingPlanSchema(_DateRangeMixin, BaseSchema):
    title = required_text("Title")
    description = fields.String(allow_none=True)
    start_date = fields.Date(allow_none=True)
    end_date = fields.Date(allow_none=True)
    is_active = fields.Boolean()


class TrainingDaySchema(BaseSchema):
    title = fields.String(allow_none=True)
    notes = fields.String(allow_none=True)
    is_rest_day = fields.Boolean()


class ExerciseSchema(BaseSchema):
    exercise_name = required_text("Exercise name")
    library_exercise_id = fields.Integer(allow_none=True)
    muscle_group = fields.String(allow_none=True, validate=validate.OneOf(MUSCLE_GROUPS))
    sets = fields.Integer(allow_none=True, validate=validate.Range(min=1, max=50))
    reps = fields.String(allow_none=True)
    weight = fields.String(allow_none=True)
    rest_seconds = fields.Integer(allow_none=True, validate=NON_NEGATIVE)
    notes = fields.String(allow_none=True)
    video_url = fields.Url(allow_none=True)
    sort_order = fields.Integer(validate=NON_NEGATIVE)


class LibraryExerciseSchema(BaseSchema):
    name = required_text("Name")
    muscle_group = fields.String(allow_none=True, validate=validate.OneOf(MUSCLE_GROUPS))
    equipment = fields.String(allow_none=True)
    description = fields.String(allow_none=True)
    video_url = fields.Url(allow_none=True)


class NutritionPlanSchema(_DateRangeMixin, BaseSchema):
    title = required_text("Title")
    description = fields.String(allow_none=True)
    start_date = fields.Date(allow_none=True)
    end_date = fields.Date(allow_none=True)
    is_active = fields.Boolean()


class NutritionDaySchema(BaseSchema):
    target_calories = fields.Integer(allow_none=True, validate=NON_NEGATIVE)
    target_protein = fields.Integer(allow_none=True, validate=NON_NEGATIVE)
    target_carbs = fields.Integer(allow_none=True, validate=NON_NEGATIVE)
    target_fat = fields.Integer(allow_none=True, validate=NON_NEGATIVE)
    notes = fields.String(allow_none=True)


class FoodItemSchema(BaseSchema):
    name = required_text("Food name")
    quantity = fields.String(allow_none=True)


class MealSchema(BaseSchema):
    meal_type = fields.String(required=True, validate=validate.OneOf(MEAL_TYPES),
                              error_messages={"required": "Meal type is required"})
    meal_time = fields.Time(allow_none=True)
    description = fields.String(allow_none=True)
    foods = fields.List(fields.Nested(FoodItemSchema), load_default=list)
    calories = fields.Float(load_default=0, validate=NON_NEGATIVE)
    protein = fields.Float(load_default=0, validate=NON_NEGATIVE)
    carbs = fields.Float(load_default=0, validate=NON_NEGATIVE)
    fat = fields.Float(load_default=0, validate=NON_NEGATIVE)
    notes = fields.String(allow_none=True)
