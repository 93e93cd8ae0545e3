"""Lookup-or-insert for shared reference rows (ingredients, units)."""

import logging
from typing import Optional, Type, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import Ingredient, Unit

logger = logging.getLogger("recipe_catalog.reference")

ReferenceModel = Type[Union[Ingredient, Unit]]


def normalize_name(value: Optional[str]) -> str:
    """Trim and lowercase a free-text reference value."""
    if not value:
        return ""
    return value.strip().lower()


def _lookup(db: Session, model: ReferenceModel, name: str) -> Optional[int]:
    return db.execute(select(model.id).where(model.name == name)).scalar_one_or_none()


def resolve_or_create(db: Session, model: ReferenceModel, value: Optional[str]) -> Optional[int]:
    """
    Return the id of the row whose normalized name matches ``value``,
    inserting one if none exists. Blank input resolves to None.

    Runs inside the caller's transaction. The insert is wrapped in a
    SAVEPOINT so a concurrent writer winning the unique constraint only
    rolls back the savepoint; the existing row is then re-fetched.
    """
    name = normalize_name(value)
    if not name:
        return None

    existing_id = _lookup(db, model, name)
    if existing_id is not None:
        return existing_id

    row = model(name=name)
    try:
        with db.begin_nested():
            db.add(row)
    except IntegrityError:
        logger.info(f"{model.__tablename__} '{name}' inserted concurrently, re-fetching")
        return db.execute(select(model.id).where(model.name == name)).scalar_one()

    logger.debug(f"Created {model.__tablename__} '{name}' (id={row.id})")
    return row.id
