# services/catalog_view.py
"""
Server-side state of the catalog table for one browser session.

`CatalogState` is the pure part (search, filters, sort, pagination,
selection) and `CatalogView` pairs it with a BaserowService to load rows,
filter dropdown options and run bulk deletes.
"""
from __future__ import annotations

import math
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from baserow_service import BaserowAPIError, BaserowService
from schemas import ColumnFilter, FilterOperator, Product, SortSpec
from utils import get_logger

logger = get_logger("catalog")

PAGE_SIZES = (5, 10, 25, 50, 100)
DEFAULT_PAGE_SIZE = 10
FILTERABLE_FIELDS = ("categories", "brand", "type", "enable_product", "visibility")


@dataclass(frozen=True)
class Column:
    field: str
    label: str
    sortable: bool = True


COLUMNS: List[Column] = [
    Column("sku", "SKU"),
    Column("name", "Product Name"),
    Column("categories", "Category"),
    Column("image", "Image", sortable=False),
    Column("description", "Description"),
    Column("short_description", "Short Description"),
    Column("price", "Price"),
    Column("tier_price", "Tier Price"),
    Column("tier_price_global", "Tier Price (Global)"),
    Column("sample_price", "Sample Price"),
    Column("vendor_code", "Vendor Code"),
    Column("brand", "Brand"),
    Column("enable_product", "Enable Product"),
    Column("color", "Color"),
    Column("hidden_from_category", "Hidden From Category"),
    Column("type", "Type"),
    Column("attribute_set", "Attribute Set"),
    Column("tax_class", "Tax Class"),
    Column("visibility", "Visibility"),
    Column("websites", "Websites"),
    Column("delivery_timeline", "Dispatch Timeline"),
    Column("offineeds_delivery_timeline", "Dispatch Timeline (Offineeds)"),
    Column("usual_delivery_times", "Dispatch Timeline (Usual)"),
    Column("dimensions", "Dimensions"),
    Column("features", "Features"),
    Column("product_visibility", "Product Visibility"),
    Column("special_features", "Special Features"),
    Column("product_in_box", "Product In Box"),
    Column("customization", "Customization"),
    Column("material", "Material"),
    Column("is_customizable_product", "Is Customizable Product?"),
    Column("customization_type", "Customization Type"),
    Column("kit_height", "Kit Height"),
    Column("kit_length", "Kit Length"),
    Column("kit_width", "Kit Width"),
]


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if page_size > 0 else 0


def has_previous_page(current_page: int) -> bool:
    return current_page != 1


def has_next_page(current_page: int, page_size: int, total_count: int) -> bool:
    return current_page * page_size < total_count


@dataclass
class CatalogState:
    current_page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    search: str = ""
    category: str = ""
    sort: SortSpec = field(default_factory=SortSpec)
    column_filters: List[ColumnFilter] = field(default_factory=list)
    selected: List[int] = field(default_factory=list)
    show_filter_row: bool = False

    # ---------- query changes (all return to page 1) ----------

    def set_search(self, text: str) -> None:
        self.search = text
        self.current_page = 1

    def set_category(self, category: str) -> None:
        self.category = category
        self.current_page = 1

    def set_page_size(self, size: int) -> None:
        if size not in PAGE_SIZES:
            raise ValueError(f"Page size must be one of {PAGE_SIZES}")
        self.page_size = size
        self.current_page = 1

    def toggle_sort(self, field_name: str) -> SortSpec:
        """asc -> desc -> unsorted on the same column; a new column starts at asc."""
        if self.sort.field == field_name and self.sort.direction == "asc":
            self.sort = SortSpec(field=field_name, direction="desc")
        elif self.sort.field == field_name and self.sort.direction == "desc":
            self.sort = SortSpec()
        else:
            self.sort = SortSpec(field=field_name, direction="asc")
        self.current_page = 1
        return self.sort

    def set_column_filter(self, field_name: str, value: str, operator: FilterOperator = "contains") -> None:
        if value == "":
            self.remove_column_filter(field_name)
            return
        new_filter = ColumnFilter(field=field_name, value=value, operator=operator)
        for i, existing in enumerate(self.column_filters):
            if existing.field == field_name:
                self.column_filters[i] = new_filter
                break
        else:
            self.column_filters.append(new_filter)
        self.current_page = 1

    def remove_column_filter(self, field_name: str) -> None:
        self.column_filters = [f for f in self.column_filters if f.field != field_name]
        self.current_page = 1

    def column_filter_value(self, field_name: str) -> str:
        for f in self.column_filters:
            if f.field == field_name:
                return f.value
        return ""

    def clear_all(self) -> None:
        self.search = ""
        self.category = ""
        self.column_filters = []
        self.sort = SortSpec()
        self.current_page = 1
        self.show_filter_row = False

    def toggle_filter_row(self) -> None:
        self.show_filter_row = not self.show_filter_row

    def query_filters(self) -> Dict[str, str]:
        filters: Dict[str, str] = {}
        if self.category:
            filters["category"] = self.category
        for f in self.column_filters:
            if f.field == "categories":
                filters["category"] = f.value
            else:
                filters[f.field] = f.value
        return filters

    # ---------- selection ----------

    def toggle_select(self, product_id: int) -> None:
        if product_id in self.selected:
            self.selected = [i for i in self.selected if i != product_id]
        else:
            self.selected = self.selected + [product_id]

    def toggle_select_all(self, loaded_ids: List[int]) -> None:
        """Selects every loaded row, or clears the selection if they are all selected already."""
        if loaded_ids and set(loaded_ids) <= set(self.selected):
            self.selected = []
        else:
            self.selected = list(loaded_ids)


class CatalogView:
    def __init__(self, service: BaserowService, state: Optional[CatalogState] = None):
        self.service = service
        self.state = state or CatalogState()
        self.products: List[Product] = []
        self.total_count = 0
        self.filter_options: Dict[str, List[str]] = {}
        self.error: Optional[str] = None
        self._generation = 0
        self._in_flight = 0
        self._lock = threading.Lock()

    # ---------- loading ----------

    def load_filter_options(self) -> Dict[str, List[str]]:
        def load(field_name: str):
            try:
                return field_name, self.service.list_distinct_values(field_name)
            except Exception as e:
                logger.error("Failed to load filter options for %s: %s", field_name, e)
                return field_name, []

        with ThreadPoolExecutor(max_workers=len(FILTERABLE_FIELDS)) as pool:
            self.filter_options = dict(pool.map(load, FILTERABLE_FIELDS))
        return self.filter_options

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    def _start_request(self) -> int:
        with self._lock:
            self._generation += 1
            self._in_flight += 1
            return self._generation

    def _finish_request(self) -> None:
        with self._lock:
            self._in_flight -= 1

    def refresh(self) -> bool:
        """
        Loads the current page. Returns False when the request failed or a
        newer refresh started before this one finished (its rows are dropped).
        """
        generation = self._start_request()
        state = self.state
        logger.debug("Loading products generation=%d page=%d size=%d", generation, state.current_page, state.page_size)
        try:
            page = self.service.list_products(
                page=state.current_page,
                size=state.page_size,
                search=state.search,
                filters=state.query_filters(),
                sort_field=state.sort.field,
                sort_direction=state.sort.direction,
            )
        except BaserowAPIError as e:
            logger.error("Failed to load products: %s", e)
            with self._lock:
                if generation == self._generation:
                    self.products = []
                    self.total_count = 0
            return False
        finally:
            self._finish_request()

        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale products response generation=%d latest=%d", generation, self._generation)
                return False
            self.products = page.results
            self.total_count = page.count
        logger.debug("Products loaded: %d of %d", len(page.results), page.count)
        return True

    # ---------- pagination ----------

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_count, self.state.page_size)

    @property
    def has_previous(self) -> bool:
        return has_previous_page(self.state.current_page)

    @property
    def has_next(self) -> bool:
        return has_next_page(self.state.current_page, self.state.page_size, self.total_count)

    @property
    def displaying(self) -> int:
        return min(self.state.page_size, len(self.products))

    def go_to_page(self, page: int) -> None:
        self.state.current_page = min(max(page, 1), max(self.total_pages, 1))

    def first_page(self) -> None:
        self.state.current_page = 1

    def previous_page(self) -> None:
        if self.has_previous:
            self.state.current_page -= 1

    def next_page(self) -> None:
        if self.has_next:
            self.state.current_page += 1

    def last_page(self) -> None:
        self.go_to_page(self.total_pages)

    # ---------- selection ----------

    @property
    def loaded_ids(self) -> List[int]:
        return [p.id for p in self.products if p.id is not None]

    @property
    def all_selected(self) -> bool:
        ids = self.loaded_ids
        return bool(ids) and set(ids) <= set(self.state.selected)

    def toggle_select_all(self) -> None:
        self.state.toggle_select_all(self.loaded_ids)

    def delete_selected(self) -> bool:
        """
        Deletes the selected rows. The caller reloads the page afterwards;
        on failure the selection is kept and `error` is set.
        """
        selected = list(self.state.selected)
        if not selected:
            return True
        try:
            self.service.delete_products(selected)
        except BaserowAPIError as e:
            logger.error("Failed to delete products: %s", e)
            self.error = f"Failed to delete products: {e}"
            return False
        self.error = None
        self.state.selected = []
        return True

    def pop_error(self) -> Optional[str]:
        """Returns the pending error message once, then forgets it."""
        error, self.error = self.error, None
        return error

    # ---------- filters ----------

    def uses_dropdown(self, field_name: str) -> bool:
        return bool(self.filter_options.get(field_name))
