"""SQLAlchemy ORM models for the recipe catalog.

Tables:
- categories: Dish categories (one reserved pseudo-category, "Ingredients")
- dishes: Named recipe root; everything else hangs off a dish
- recipes: 1:1 timing/servings metadata for a dish
- instruction_steps: Ordered steps, numbered from 1 per dish
- ingredients / units: Normalized reference data shared across dishes
- dish_ingredients: Association of a dish with an ingredient, quantity and unit
- dish_images: 1:1 stored image filename for a dish
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import (
    String,
    Text,
    Integer,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class Dish(Base):
    """Root entity. A dish owns at most one recipe and at most one image."""
    __tablename__ = "dishes"
    __table_args__ = (
        Index("ix_dishes_category_id", "category_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False
    )


class Recipe(Base):
    __tablename__ = "recipes"

    dish_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dishes.id"), primary_key=True
    )
    prep_time_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cook_time_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    servings: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class InstructionStep(Base):
    __tablename__ = "instruction_steps"
    __table_args__ = (
        UniqueConstraint("dish_id", "step_number", name="uq_instruction_steps_dish_step"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    dish_id: Mapped[int] = mapped_column(Integer, ForeignKey("dishes.id"), nullable=False)
    step_number: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)


class Ingredient(Base):
    """Shared ingredient, stored trimmed and lowercased."""
    __tablename__ = "ingredients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)


class Unit(Base):
    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)


class DishIngredient(Base):
    __tablename__ = "dish_ingredients"
    __table_args__ = (
        Index("ix_dish_ingredients_ingredient_id", "ingredient_id"),
        Index("ix_dish_ingredients_unit_id", "unit_id"),
    )

    dish_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dishes.id"), primary_key=True
    )
    ingredient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredients.id"), primary_key=True
    )
    unit_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("units.id"), nullable=True
    )
    quantity: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # Input order of the ingredient list
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class DishImage(Base):
    __tablename__ = "dish_images"

    dish_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dishes.id"), primary_key=True
    )
    image_filename: Mapped[str] = mapped_column(String(255), nullable=False)
