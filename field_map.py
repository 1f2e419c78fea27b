# field_map.py
"""
Named product attribute <-> Baserow field identifier mapping.

The mapping is deployment specific (Baserow assigns `field_NNNN` ids per
table), so it is loaded from a JSON resource instead of being compiled in.
Each attribute also declares the shape of its raw value, decided once here
rather than sniffed per row.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional


class FieldMapError(ValueError):
    """Raised when the field map resource is missing or malformed."""


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    OPTIONAL_NUMBER = "optional_number"
    BOOLEAN = "boolean"
    OPTION = "option"          # {"id": .., "value": "Label", "color": ..}
    LINK = "link"              # [{"id": .., "value": "Label"}, ...]
    IMAGE = "image"            # URL string or [{"url": .., "name": ..}, ...]
    FILE_URL = "file_url"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    field: str
    kind: FieldKind
    sortable: bool = True


@dataclass(frozen=True)
class CategorySchema:
    code: str
    name: str
    parent_code: str
    is_active: str
    products: Optional[str] = None


@dataclass(frozen=True)
class FieldMap:
    products: Dict[str, FieldSpec]
    category_filter_field: str
    categories: CategorySchema
    source: Optional[Path] = field(default=None, compare=False)

    def spec_for(self, name: str) -> Optional[FieldSpec]:
        return self.products.get(name)

    def field_name_for(self, name: str) -> str:
        """Opaque identifier for a named attribute; unknown names pass through."""
        spec = self.products.get(name)
        return spec.field if spec else name

    def is_option_field(self, name: str) -> bool:
        spec = self.products.get(name)
        return spec is not None and spec.kind is FieldKind.OPTION


def parse_field_map(data: dict, source: Optional[Path] = None) -> FieldMap:
    if not isinstance(data, dict):
        raise FieldMapError("Field map must be a JSON object")

    raw_products = data.get("products")
    if not isinstance(raw_products, dict) or not raw_products:
        raise FieldMapError("Field map needs a non-empty 'products' object")

    products: Dict[str, FieldSpec] = {}
    for name, entry in raw_products.items():
        if not isinstance(entry, dict) or not entry.get("field"):
            raise FieldMapError(f"Field map entry '{name}' needs a 'field' identifier")
        try:
            kind = FieldKind(entry.get("kind", FieldKind.TEXT.value))
        except ValueError:
            raise FieldMapError(f"Unknown field kind '{entry.get('kind')}' for '{name}'") from None
        products[name] = FieldSpec(
            name=name,
            field=str(entry["field"]),
            kind=kind,
            sortable=bool(entry.get("sortable", True)),
        )

    raw_categories = data.get("categories") or {}
    try:
        categories = CategorySchema(
            code=raw_categories["code"],
            name=raw_categories["name"],
            parent_code=raw_categories["parent_code"],
            is_active=raw_categories["is_active"],
            products=raw_categories.get("products"),
        )
    except (KeyError, TypeError) as e:
        raise FieldMapError(f"Field map 'categories' is missing {e}") from None

    category_filter_field = data.get("category_filter_field")
    if not category_filter_field:
        spec = products.get("categories")
        if spec is None:
            raise FieldMapError("Field map needs 'category_filter_field' or a 'categories' product field")
        category_filter_field = spec.field

    return FieldMap(
        products=products,
        category_filter_field=category_filter_field,
        categories=categories,
        source=source,
    )


def load_field_map(path: str | Path) -> FieldMap:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise FieldMapError(f"Field map not found: {path}") from None
    except json.JSONDecodeError as e:
        raise FieldMapError(f"Field map {path} is not valid JSON: {e}") from None
    return parse_field_map(data, source=path)
