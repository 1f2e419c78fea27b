# routes/products.py

from fastapi import APIRouter, Depends, Query, HTTPException, Request
from typing import Any, Dict, Literal, Optional

import schemas
from baserow_service import BaserowAPIError, BaserowService, BulkDeleteError
from deps import get_baserow_service

router = APIRouter(
    prefix="/api/products",
    tags=["Products"],
)

FILTER_PREFIX = "filter_"


def raise_for_baserow(e: BaserowAPIError, not_found: str = "Product not found"):
    if e.status_code == 404:
        raise HTTPException(status_code=404, detail=not_found)
    raise HTTPException(status_code=502, detail=f"Baserow request failed: {e}")


@router.get("/", response_model=schemas.ProductPage)
def list_products(
    request: Request,
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=200),
    search: Optional[str] = Query(None),
    sort_field: Optional[str] = Query(None),
    sort_direction: Optional[Literal["asc", "desc"]] = Query(None),
    service: BaserowService = Depends(get_baserow_service),
):
    """
    Get a page of products. Any `filter_<attribute>=value` query parameter
    becomes a column filter; `filter_category` matches the linked categories.
    """
    filters = {
        key[len(FILTER_PREFIX):]: value
        for key, value in request.query_params.items()
        if key.startswith(FILTER_PREFIX)
    }
    try:
        return service.list_products(
            page=page, size=size, search=search or "", filters=filters,
            sort_field=sort_field, sort_direction=sort_direction,
        )
    except BaserowAPIError as e:
        raise_for_baserow(e)


@router.get("/distinct/{field}", response_model=schemas.DistinctValues)
def get_distinct_values(field: str, service: BaserowService = Depends(get_baserow_service)):
    """
    Sorted unique values of one attribute, for filter dropdowns.
    """
    return {"field": field, "values": service.list_distinct_values(field)}


@router.post("/bulk-delete")
def bulk_delete_products(payload: schemas.BulkDeletePayload, service: BaserowService = Depends(get_baserow_service)):
    try:
        service.delete_products(payload.ids)
    except BulkDeleteError as e:
        raise HTTPException(status_code=502, detail={
            "message": str(e),
            "failed": sorted(e.failed),
            "deleted": sorted(e.deleted),
        })
    return {"deleted": payload.ids}


@router.get("/{product_id}", response_model=schemas.Product)
def get_product(product_id: int, service: BaserowService = Depends(get_baserow_service)):
    try:
        return service.get_product(product_id)
    except BaserowAPIError as e:
        raise_for_baserow(e)


@router.post("/", status_code=201)
def create_product(payload: schemas.ProductWrite, service: BaserowService = Depends(get_baserow_service)) -> Dict[str, Any]:
    try:
        return service.create_product(payload.model_dump(exclude_none=True))
    except BaserowAPIError as e:
        raise_for_baserow(e)


@router.patch("/{product_id}")
def update_product(
    product_id: int,
    payload: schemas.ProductWrite,
    service: BaserowService = Depends(get_baserow_service),
) -> Dict[str, Any]:
    try:
        return service.update_product(product_id, payload.model_dump(exclude_none=True))
    except BaserowAPIError as e:
        raise_for_baserow(e)


@router.delete("/{product_id}")
def delete_product(product_id: int, service: BaserowService = Depends(get_baserow_service)):
    try:
        service.delete_product(product_id)
    except BaserowAPIError as e:
        raise_for_baserow(e)
    return {"deleted": product_id}
