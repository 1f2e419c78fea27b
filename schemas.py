# schemas.py
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SortDirection = Literal["asc", "desc"]
FilterOperator = Literal["contains", "equals", "greater", "less"]

# =========================
# Base model configurations
# =========================

class APIBase(BaseModel):
    """Base for models mapped to external API payloads."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

# ======================================================
# Products
# ======================================================

class Product(BaseModel):
    id: Optional[int] = None
    sku: str = ""
    name: str = ""
    image: str = ""
    description: str = ""
    short_description: str = ""
    price: float = 0.0
    tier_price: str = ""
    tier_price_global: str = ""
    sample_price: Optional[float] = None
    vendor_code: str = ""
    brand: str = ""
    enable_product: str = ""
    color: str = ""
    hidden_from_category: str = "No"
    type: str = ""
    attribute_set: str = ""
    tax_class: str = ""
    visibility: str = ""
    websites: str = ""
    delivery_timeline: str = ""
    offineeds_delivery_timeline: str = ""
    usual_delivery_times: str = ""
    dimensions: str = ""
    features: str = ""
    product_visibility: str = ""
    special_features: str = ""
    product_in_box: str = ""
    customization: str = ""
    material: str = ""
    is_customizable_product: str = ""
    customization_type: str = ""
    kit_height: str = ""
    kit_length: str = ""
    kit_width: str = ""
    quantity: float = 0.0
    categories: str = ""
    base_image: str = ""
    small_image: str = ""
    thumbnail_image: str = ""
    is_in_stock: str = ""
    created_at: str = ""
    updated_at: str = ""

class ProductWrite(APIBase):
    """Named attributes for create/update; unknown keys are kept and passed through."""
    sku: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[float] = None
    categories: Optional[str] = None

class ProductPage(BaseModel):
    results: List[Product] = Field(default_factory=list)
    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None

class BulkDeletePayload(BaseModel):
    ids: List[int]

# ======================================================
# Catalog query state
# ======================================================

class ColumnFilter(BaseModel):
    field: str
    value: str
    operator: FilterOperator = "contains"

class SortSpec(BaseModel):
    field: Optional[str] = None
    direction: Optional[SortDirection] = None

    @property
    def active(self) -> bool:
        return self.field is not None and self.direction is not None

# ======================================================
# Categories
# ======================================================

class Category(BaseModel):
    id: int
    code: str = ""
    name: str = ""
    parent_code: str = ""
    is_active: bool = False
    product_count: int = 0
    subcategories: List["Category"] = Field(default_factory=list)

class SubcategorySummary(BaseModel):
    name: str
    code: str
    product_count: int = 0

class CategoryTreeNode(BaseModel):
    name: str
    code: str
    product_count: int = 0
    subcategories: List[str] = Field(default_factory=list)
    subcategories_with_counts: List[SubcategorySummary] = Field(default_factory=list)

class DistinctValues(BaseModel):
    field: str
    values: List[str]
