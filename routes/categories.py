# routes/categories.py
from typing import List

from fastapi import APIRouter, Depends, Query

import schemas
from baserow_service import BaserowService
from deps import get_baserow_service

router = APIRouter(
    prefix="/api/categories",
    tags=["Categories"],
)


@router.get("/", response_model=List[schemas.Category])
def list_categories(service: BaserowService = Depends(get_baserow_service)):
    """Every category row, flat. Empty when the category table cannot be read."""
    return service.list_categories()


@router.get("/tree", response_model=List[schemas.CategoryTreeNode])
def category_tree(
    include_counts: bool = Query(False, description="Also count linked products (pages the whole products table)"),
    service: BaserowService = Depends(get_baserow_service),
):
    return service.list_categories_with_subcategories(include_counts=include_counts)
