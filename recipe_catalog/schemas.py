"""Pydantic schemas for the recipe catalog API.

Request/response models for:
- Recipe writes (the parsed multipart form)
- Recipe list and detail views
- Reference data (ingredients, categories)
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


# --- Recipe write ---

class IngredientEntry(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: Optional[str] = Field(None, max_length=50)
    # Free-text unit name; the form historically calls it unit_id
    unit: Optional[str] = Field(
        None, max_length=50, validation_alias=AliasChoices("unit", "unit_id")
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("ingredient name must not be blank")
        return v

    @field_validator("quantity", mode="before")
    @classmethod
    def quantity_as_text(cls, v):
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        raise ValueError("quantity must be text or a number")


class RecipeSpec(BaseModel):
    """Everything needed to create or replace a recipe."""
    name: str = Field(..., min_length=1, max_length=200)
    category_id: int
    prep_time: Optional[int] = Field(None, ge=0)
    cook_time: Optional[int] = Field(None, ge=0)
    servings: Optional[int] = Field(None, ge=0)
    instructions: list[str] = Field(..., min_length=1)
    ingredients: list[IngredientEntry] = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    @field_validator("prep_time", "cook_time", "servings", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("instructions")
    @classmethod
    def steps_not_blank(cls, v: list[str]) -> list[str]:
        if any(not step.strip() for step in v):
            raise ValueError("instruction steps must not be blank")
        return v

    @field_validator("ingredients")
    @classmethod
    def ingredients_unique(cls, v: list[IngredientEntry]) -> list[IngredientEntry]:
        seen = set()
        for entry in v:
            key = entry.name.strip().lower()
            if key in seen:
                raise ValueError(f"ingredient '{key}' is listed more than once")
            seen.add(key)
        return v


class RecipeWriteResult(BaseModel):
    message: str
    dish_id: int


# --- Recipe read ---

class RecipeSummaryOut(BaseModel):
    id: int
    name: str
    image_url: Optional[str] = None


class RecipeIngredientOut(BaseModel):
    name: str
    quantity: Optional[str] = None
    unit: str = ""


class RecipeDetailOut(BaseModel):
    id: int
    name: str
    category_id: int
    category: Optional[str] = None
    image_url: Optional[str] = None
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None
    instructions: list[str]
    ingredients: list[RecipeIngredientOut]


# --- Reference data ---

class IngredientOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class CategoryOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
