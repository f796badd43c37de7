"""Routes for the food catalog."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...models import Food, FoodCategory
from ...services import FoodCatalog
from ..deps import get_catalog

router = APIRouter()


class FoodCreate(BaseModel):
    name: str = Field(min_length=1)
    emoji: Optional[str] = None
    category: Optional[FoodCategory] = None
    is_common: bool = False


@router.get("/", response_model=list[Food])
async def list_foods(catalog: FoodCatalog = Depends(get_catalog)):
    """All foods, alphabetically."""
    return catalog.list_foods()


@router.get("/common", response_model=list[Food])
async def list_common_foods(catalog: FoodCatalog = Depends(get_catalog)):
    """Foods flagged as common allergens or first foods."""
    return catalog.list_foods(common_only=True)


@router.post("/", response_model=Food)
async def create_food(body: FoodCreate, catalog: FoodCatalog = Depends(get_catalog)):
    """Create a custom food, or return the existing one with the same name."""
    return catalog.get_or_create(
        body.name,
        emoji=body.emoji,
        category=body.category,
        is_common=body.is_common,
    )


@router.delete("/{food_id}")
async def delete_food(food_id: str, catalog: FoodCatalog = Depends(get_catalog)):
    catalog.delete_food(food_id)
    return {"message": "Food deleted successfully"}
