"""Tests for the food catalog and baby profiles."""

from datetime import datetime

import pytest

from food_bricks.errors import DeletionConflict, EntityNotFound, InvalidInput
from food_bricks.models import Caregiver, CaregiverRole, FoodCategory, SteroidCreamStatus
from food_bricks.services.catalog import COMMON_FOODS


class TestFoodCatalog:
    """Tests for FoodCatalog."""

    def test_seed_once(self, catalog):
        """Test seeding fills an empty catalog and is skipped afterwards."""
        assert catalog.seed() == len(COMMON_FOODS)
        assert catalog.seed() == 0
        assert len(catalog.list_foods()) == len(COMMON_FOODS)

    def test_common_foods(self, catalog):
        catalog.seed()
        common = catalog.list_foods(common_only=True)
        assert common
        assert all(f.is_common for f in common)
        assert "Peanut" in [f.name for f in common]

    def test_foods_sorted_by_name(self, catalog):
        catalog.seed()
        names = [f.name.lower() for f in catalog.list_foods()]
        assert names == sorted(names)

    def test_get_or_create_returns_existing(self, catalog, foods):
        assert catalog.get_or_create("Egg").id == foods["egg"].id

    def test_get_or_create_custom(self, catalog):
        food = catalog.get_or_create("  Kale ", category=FoodCategory.VEGETABLE)
        assert food.name == "Kale"
        assert catalog.get_food(food.id) == food
        assert food.is_common is False

    def test_delete_unused_food(self, catalog, foods):
        catalog.delete_food(foods["oats"].id)
        with pytest.raises(EntityNotFound):
            catalog.get_food(foods["oats"].id)

    def test_delete_food_with_trials_blocked(self, catalog, controller, baby, foods, clock):
        """Test a food referenced by a trial cannot be removed."""
        controller.start_trial(baby.id, foods["egg"].id, clock())

        with pytest.raises(DeletionConflict):
            catalog.delete_food(foods["egg"].id)

        assert catalog.get_food(foods["egg"].id) == foods["egg"]

    def test_delete_missing_food(self, catalog):
        with pytest.raises(EntityNotFound):
            catalog.delete_food("missing")


class TestBabyService:
    """Tests for baby profiles and caregivers."""

    def test_creator_flag(self, babies, clock):
        """Test the creator is found by flag, not by position."""
        baby = babies.create_baby("u1", "Ada", datetime(2025, 11, 1))
        clock.advance(minutes=5)
        babies.add_caregiver(baby.id, "u2", CaregiverRole.DOCTOR)

        caregivers = babies.list_caregivers(baby.id)
        assert [c.user_id for c in caregivers] == ["u1", "u2"]
        assert babies.get_creator(baby.id).user_id == "u1"
        assert not caregivers[1].is_creator

    def test_creator_found_when_added_later(self, babies, storage, clock):
        baby = babies.create_baby("u1", "Ada", datetime(2025, 11, 1))
        storage.table(storage.CAREGIVERS).truncate()
        clock.advance(minutes=1)
        babies.add_caregiver(baby.id, "nanny")
        storage.add_caregiver(Caregiver(
            user_id="u1", baby_id=baby.id, is_creator=True, created_at=clock.advance(minutes=1),
        ))

        assert babies.list_caregivers(baby.id)[0].user_id == "nanny"
        assert babies.get_creator(baby.id).user_id == "u1"

    def test_list_babies_for_user(self, babies):
        a = babies.create_baby("u1", "Ada", datetime(2025, 11, 1))
        b = babies.create_baby("u2", "Bo", datetime(2025, 6, 1))
        babies.add_caregiver(b.id, "u1")
        assert {x.id for x in babies.list_babies_for_user("u1")} == {a.id, b.id}

    def test_add_caregiver_unknown_baby(self, babies):
        with pytest.raises(EntityNotFound):
            babies.add_caregiver("missing", "u1")


class TestSteroidCream:
    def test_start_and_end(self, babies, baby, clock):
        cream = babies.start_steroid_cream(baby.id, duration_days=5, notes="elbows")
        assert babies.get_active_steroid_cream(baby.id) == cream

        clock.advance(days=5)
        ended = babies.end_steroid_cream(cream.id)

        assert ended.status == SteroidCreamStatus.ENDED
        assert ended.ended_at == clock()
        assert babies.get_active_steroid_cream(baby.id) is None

    def test_end_unknown(self, babies):
        with pytest.raises(EntityNotFound):
            babies.end_steroid_cream("missing")


class TestUpdateBaby:
    def test_update_fields(self, babies, clock):
        baby = babies.create_baby("u1", "Ada", datetime(2025, 11, 1))
        clock.advance(days=1)

        updated = babies.update_baby(baby.id, {"name": "Ada Rose", "gender": "female"})

        assert updated.name == "Ada Rose"
        assert updated.gender == "female"
        assert updated.date_of_birth == baby.date_of_birth
        assert updated.updated_at == clock()
        assert babies.get_baby(baby.id) == updated

    def test_invalid_update(self, babies):
        baby = babies.create_baby("u1", "Ada", datetime(2025, 11, 1))
        with pytest.raises(InvalidInput):
            babies.update_baby(baby.id, {"name": ""})
        with pytest.raises(InvalidInput):
            babies.update_baby(baby.id, {"id": "other"})
        assert babies.get_baby(baby.id).name == "Ada"

    def test_update_unknown(self, babies):
        with pytest.raises(EntityNotFound):
            babies.update_baby("missing", {"name": "X"})
