"""Tests for the read-only recipe views."""

import pytest

from recipe_catalog.errors import NotFoundError, ValidationError
from recipe_catalog.services import recipe_reader
from recipe_catalog.services.recipe_writer import create_recipe


@pytest.fixture
def catalog(db_session, make_spec, categories):
    """Three dishes: two egg-related, one with an image."""
    ids = {}
    ids["benedict"] = create_recipe(
        db_session,
        make_spec(
            name="Eggs Benedict",
            ingredients=[
                {"name": "Muffin", "quantity": "1", "unit": ""},
                {"name": "Ham", "quantity": "2", "unit": "slices"},
            ],
        ),
        image_filename="100-benedict.jpg",
    )
    ids["omelette"] = create_recipe(
        db_session,
        make_spec(
            name="Omelette",
            ingredients=[
                {"name": "Egg", "quantity": "3", "unit": ""},
                {"name": "Egg white", "quantity": "1", "unit": ""},
            ],
        ),
    )
    ids["cake"] = create_recipe(
        db_session,
        make_spec(
            name="Sponge Cake",
            category_id=categories["Dessert"],
            ingredients=[{"name": "Flour", "quantity": "200", "unit": "g"}],
        ),
    )
    return ids


def test_list_recipes_ordered_by_id_with_image_urls(db_session, catalog):
    recipes = recipe_reader.list_recipes(db_session)

    assert [r.id for r in recipes] == sorted(catalog.values())
    by_name = {r.name: r for r in recipes}
    assert by_name["Eggs Benedict"].image_url == "/imgs/100-benedict.jpg"
    assert by_name["Omelette"].image_url is None


def test_list_ingredients_ordered_by_name(db_session, catalog):
    names = [i.name for i in recipe_reader.list_ingredients(db_session)]
    assert names == ["egg", "egg white", "flour", "ham", "muffin"]


def test_list_by_category(db_session, catalog, categories):
    desserts = recipe_reader.list_by_category(db_session, "Dessert")
    assert [r.name for r in desserts] == ["Sponge Cake"]

    by_id = recipe_reader.list_by_category_id(db_session, categories["Breakfast"])
    assert [r.name for r in by_id] == ["Eggs Benedict", "Omelette"]

    assert recipe_reader.list_by_category(db_session, "Nope") == []


def test_list_by_ingredient_normalizes_input(db_session, catalog):
    results = recipe_reader.list_by_ingredient(db_session, "  HAM ")
    assert [r.name for r in results] == ["Eggs Benedict"]


def test_search_matches_name_or_ingredient_once_per_dish(db_session, catalog):
    results = recipe_reader.search(db_session, "egg")

    # Omelette matches through two ingredient rows but appears once
    assert [r.name for r in results] == ["Eggs Benedict", "Omelette"]


def test_search_is_case_insensitive(db_session, catalog):
    assert [r.name for r in recipe_reader.search(db_session, "FLOUR")] == ["Sponge Cake"]
    assert [r.name for r in recipe_reader.search(db_session, "cake")] == ["Sponge Cake"]


def test_search_treats_wildcards_literally(db_session, catalog):
    assert recipe_reader.search(db_session, "%") == []
    assert recipe_reader.search(db_session, "_") == []


def test_search_requires_query(db_session):
    with pytest.raises(ValidationError):
        recipe_reader.search(db_session, "   ")
    with pytest.raises(ValidationError):
        recipe_reader.search(db_session, None)


def test_list_categories_hides_reserved(db_session, categories):
    names = [c.name for c in recipe_reader.list_categories(db_session)]
    assert names == ["Breakfast", "Dessert", "Dinner"]


def test_get_recipe_unknown_raises(db_session):
    with pytest.raises(NotFoundError):
        recipe_reader.get_recipe(db_session, 999)


def test_get_recipe_includes_category_name(db_session, catalog):
    cake = recipe_reader.get_recipe(db_session, catalog["cake"])
    assert cake.category == "Dessert"
    assert cake.ingredients[0].name == "flour"
    assert cake.ingredients[0].unit == "g"


def test_list_full_recipes(db_session, catalog):
    full = recipe_reader.list_full_recipes(db_session)

    assert [r.name for r in full] == ["Eggs Benedict", "Omelette", "Sponge Cake"]
    omelette = full[1]
    assert [i.name for i in omelette.ingredients] == ["egg", "egg white"]
    assert omelette.instructions == ["Toast bread"]
