import sys
import os
from sqlalchemy import select

# Add project root to sys.path
sys.path.append(os.path.join(os.path.dirname(__file__), "../"))

from recipe_catalog.db import get_sessionmaker
from recipe_catalog.models import Category
from recipe_catalog.settings import settings

DEFAULT_CATEGORIES = [
    "Breakfast",
    "Lunch",
    "Dinner",
    "Dessert",
    "Snack",
    "Drinks",
]


def seed_categories(session) -> int:
    """Insert any missing default categories (plus the reserved one). Returns the number added."""
    wanted = DEFAULT_CATEGORIES + [settings.reserved_category]
    existing = set(session.scalars(select(Category.name).where(Category.name.in_(wanted))))
    added = 0
    for name in wanted:
        if name in existing:
            continue
        session.add(Category(name=name))
        added += 1
    session.commit()
    return added


def main():
    print(f"Connecting to {settings.database_url}...")
    session = get_sessionmaker()()
    try:
        added = seed_categories(session)
        print(f"Seeded {added} categories.")
    except Exception as e:
        session.rollback()
        print(f"Error: {e}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
