"""Food catalog: seeding, lookup and guarded deletion."""

import logging
from typing import Optional

from pydantic import ValidationError

from ..errors import DeletionConflict, EntityNotFound, InvalidInput
from ..models import Food, FoodCategory
from .storage import TrackerStorage

logger = logging.getLogger(__name__)

# (name, emoji, category, is_common)
COMMON_FOODS = [
    ("Beef", "🥩", FoodCategory.PROTEIN, True),
    ("Chicken", "🍗", FoodCategory.PROTEIN, True),
    ("Lamb", "🍖", FoodCategory.PROTEIN, False),
    ("Pork", "🥓", FoodCategory.PROTEIN, False),
    ("Turkey", "🦃", FoodCategory.PROTEIN, False),
    ("Salmon", "🐟", FoodCategory.PROTEIN, True),
    ("Sardines", "🐟", FoodCategory.PROTEIN, False),
    ("Tuna", "🐟", FoodCategory.PROTEIN, True),
    ("White fish", "🐟", FoodCategory.PROTEIN, False),
    ("Shellfish", "🦐", FoodCategory.PROTEIN, True),
    ("Prawns", "🦐", FoodCategory.PROTEIN, True),
    ("Crab", "🦀", FoodCategory.PROTEIN, True),
    ("Egg", "🥚", FoodCategory.PROTEIN, True),
    ("Tofu", "🫘", FoodCategory.PROTEIN, False),
    ("Almonds", "🌰", FoodCategory.PROTEIN, True),
    ("Brazil nuts", "🌰", FoodCategory.PROTEIN, False),
    ("Cashews", "🌰", FoodCategory.PROTEIN, True),
    ("Peanut", "🥜", FoodCategory.PROTEIN, True),
    ("Pistachio", "🥜", FoodCategory.PROTEIN, False),
    ("Pecans", "🌰", FoodCategory.PROTEIN, True),
    ("Chia seeds", "🌾", FoodCategory.GRAIN, False),
    ("Hemp seeds", "🌾", FoodCategory.GRAIN, False),
    ("Pumpkin seeds", "🎃", FoodCategory.GRAIN, False),
    ("Sunflower seeds", "🌻", FoodCategory.GRAIN, False),
    ("Sesame", "🫴", FoodCategory.GRAIN, True),
    ("Tahini", "🫴", FoodCategory.GRAIN, True),
    ("Black beans", "🫘", FoodCategory.LEGUME, False),
    ("Butterbeans", "🫘", FoodCategory.LEGUME, False),
    ("Cannelini beans", "🫘", FoodCategory.LEGUME, False),
    ("Chickpeas", "🫘", FoodCategory.LEGUME, False),
    ("Kidney beans", "🫘", FoodCategory.LEGUME, False),
    ("Lentils", "🫘", FoodCategory.LEGUME, False),
    ("Soy", "🫘", FoodCategory.PROTEIN, True),
    ("Asparagus", "🥬", FoodCategory.VEGETABLE, False),
    ("Beetroot", "🫚", FoodCategory.VEGETABLE, False),
    ("Broccoli", "🥦", FoodCategory.VEGETABLE, True),
    ("Cabbage", "🥬", FoodCategory.VEGETABLE, False),
    ("Carrot", "🥕", FoodCategory.VEGETABLE, True),
    ("Cauliflower", "🥦", FoodCategory.VEGETABLE, False),
    ("Celery", "🥬", FoodCategory.VEGETABLE, False),
    ("Cucumber", "🥒", FoodCategory.VEGETABLE, False),
    ("Eggplant", "🍆", FoodCategory.VEGETABLE, False),
    ("Garlic", "🧄", FoodCategory.VEGETABLE, False),
    ("Ginger", "🫚", FoodCategory.VEGETABLE, False),
    ("Lettuce", "🥬", FoodCategory.VEGETABLE, False),
    ("Mint", "🌿", FoodCategory.VEGETABLE, False),
    ("Peas", "🫛", FoodCategory.VEGETABLE, False),
    ("Potato", "🥔", FoodCategory.VEGETABLE, False),
    ("Pumpkin", "🎃", FoodCategory.VEGETABLE, False),
    ("Rosemary", "🌿", FoodCategory.VEGETABLE, False),
    ("Shallot", "🧅", FoodCategory.VEGETABLE, False),
    ("Spinach", "🥬", FoodCategory.VEGETABLE, False),
    ("Sweet Potato", "🍠", FoodCategory.VEGETABLE, True),
    ("Tomato", "🍅", FoodCategory.VEGETABLE, False),
    ("Zucchini", "🥒", FoodCategory.VEGETABLE, False),
    ("Barley", "🌾", FoodCategory.GRAIN, False),
    ("Bread", "🍞", FoodCategory.GRAIN, False),
    ("Couscous", "🍚", FoodCategory.GRAIN, False),
    ("Noodles", "🍜", FoodCategory.GRAIN, False),
    ("Oats", "🌾", FoodCategory.GRAIN, True),
    ("Pasta", "🍝", FoodCategory.GRAIN, False),
    ("Quinoa", "🌾", FoodCategory.GRAIN, False),
    ("Rice", "🍚", FoodCategory.GRAIN, True),
    ("Weet-bix", "🌾", FoodCategory.GRAIN, False),
    ("Wheat", "🌾", FoodCategory.GRAIN, True),
    ("Apple", "🍎", FoodCategory.FRUIT, True),
    ("Avocado", "🥑", FoodCategory.FRUIT, True),
    ("Banana", "🍌", FoodCategory.FRUIT, True),
    ("Blueberry", "🫐", FoodCategory.FRUIT, False),
    ("Kiwi fruit", "🥝", FoodCategory.FRUIT, False),
    ("Mango", "🥭", FoodCategory.FRUIT, False),
    ("Orange", "🍊", FoodCategory.FRUIT, False),
    ("Pear", "🍐", FoodCategory.FRUIT, False),
    ("Pineapple", "🍍", FoodCategory.FRUIT, False),
    ("Prunes", "🫐", FoodCategory.FRUIT, False),
    ("Raspberry", "🫐", FoodCategory.FRUIT, False),
    ("Rockmelon", "🍈", FoodCategory.FRUIT, False),
    ("Strawberry", "🍓", FoodCategory.FRUIT, True),
    ("Watermelon", "🍉", FoodCategory.FRUIT, False),
    ("Milk", "🥛", FoodCategory.DAIRY, True),
    ("Cottage cheese", "🧀", FoodCategory.DAIRY, False),
    ("Goats cheese", "🧀", FoodCategory.DAIRY, False),
]


class FoodCatalog:
    """
    Catalog of foods shared by every baby.

    Foods are created once, either by the seed or on first custom use, and
    are never edited. A food cannot be deleted while any trial uses it.
    """

    def __init__(self, storage: TrackerStorage):
        self.storage = storage

    def seed(self) -> int:
        """Insert the default foods into an empty catalog; returns how many were added."""
        existing = self.storage.list_foods()
        if existing:
            logger.info("Catalog already contains %d foods, skipping seed", len(existing))
            return 0
        for name, emoji, category, is_common in COMMON_FOODS:
            self.storage.add_food(Food(name=name, emoji=emoji, category=category, is_common=is_common))
        logger.info("Seeded %d foods", len(COMMON_FOODS))
        return len(COMMON_FOODS)

    def list_foods(self, common_only: bool = False) -> list[Food]:
        return self.storage.list_foods(common_only=common_only)

    def get_food(self, food_id: str) -> Food:
        food = self.storage.get_food(food_id)
        if food is None:
            raise EntityNotFound("food", food_id)
        return food

    def get_or_create(
        self,
        name: str,
        emoji: Optional[str] = None,
        category: Optional[FoodCategory] = None,
        is_common: bool = False,
    ) -> Food:
        """Return the food with this name, creating a custom entry if needed."""
        name = name.strip()
        existing = self.storage.get_food_by_name(name)
        if existing is not None:
            return existing
        try:
            food = Food(name=name, emoji=emoji, category=category, is_common=is_common)
        except ValidationError as exc:
            raise InvalidInput("Invalid food", details=str(exc)) from exc
        self.storage.add_food(food)
        logger.info("Added custom food %r", name)
        return food

    def delete_food(self, food_id: str) -> None:
        food = self.get_food(food_id)
        in_use = self.storage.count_trials_for_food(food_id)
        if in_use:
            raise DeletionConflict(
                f"Cannot delete {food.name}: {in_use} trial(s) still reference it",
                details="Delete the food's progress first.",
            )
        self.storage.delete_food(food_id)
        logger.info("Deleted food %s (%s)", food.name, food_id)
