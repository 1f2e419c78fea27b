# baserow_service.py
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import requests

from field_map import CategorySchema, FieldKind, FieldMap, FieldSpec
from schemas import Category, CategoryTreeNode, Product, ProductPage, SubcategorySummary
from utils import get_logger, parse_float, split_labels

logger = get_logger("baserow")

CATEGORY_PAGE_SIZE = 200
DISTINCT_VALUES_PAGE_SIZE = 1000
MAX_DELETE_WORKERS = 8

ROOT_CATALOG_PREFIX = "root_catalog"
MAIN_CATALOG_CODE = "root_catalog_main_by_category"
BUILDBOX_CATALOG_CODE = "root_catalog_buildbox"
FALLBACK_CATEGORY = {"name": "All Categories", "code": ""}


class BaserowAPIError(Exception):
    """A request to Baserow failed (network error or non-2xx response)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BulkDeleteError(BaserowAPIError):
    """At least one row of a bulk delete failed; the others were still deleted."""

    def __init__(self, failed: Dict[int, Exception], deleted: List[int]):
        ids = ", ".join(str(i) for i in sorted(failed))
        super().__init__(f"Failed to delete {len(failed)} of {len(failed) + len(deleted)} rows: {ids}")
        self.failed = failed
        self.deleted = deleted


# ---------------------------------------------------------------------------
# Raw value extraction (one function per raw shape)
# ---------------------------------------------------------------------------

def extract_option_value(value: Any) -> str:
    if not value:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return str(value.get("value") or "")
    return ""


def extract_link_values(value: Any) -> str:
    if not isinstance(value, list):
        return ""
    labels = []
    for item in value:
        if isinstance(item, dict):
            labels.append(str(item.get("value") or ""))
        else:
            labels.append(str(item or ""))
    return ", ".join(labels)


def extract_image_url(value: Any) -> str:
    if not value:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        first = value[0]
        if isinstance(first, dict):
            return first.get("url") or first.get("file") or ""
        return ""
    if isinstance(value, dict):
        return value.get("url") or ""
    return ""


def convert_value(spec: FieldSpec, value: Any) -> Any:
    kind = spec.kind
    if kind is FieldKind.NUMBER:
        number = parse_float(value)
        return max(number, 0.0) if number is not None else 0.0
    if kind is FieldKind.OPTIONAL_NUMBER:
        # a zero sample price means "not set"
        return parse_float(value) or None
    if kind is FieldKind.BOOLEAN:
        return "Yes" if value else "No"
    if kind is FieldKind.OPTION:
        return extract_option_value(value)
    if kind is FieldKind.LINK:
        return extract_link_values(value)
    if kind is FieldKind.IMAGE:
        return extract_image_url(value)
    if kind is FieldKind.FILE_URL:
        return value if isinstance(value, str) else extract_image_url(value)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def to_product(raw: Dict[str, Any], field_map: FieldMap) -> Product:
    """Maps one raw Baserow row onto the named Product shape."""
    data: Dict[str, Any] = {"id": raw.get("id")}
    for name, spec in field_map.products.items():
        data[name] = convert_value(spec, raw.get(spec.field))
    return Product(**data)


def to_raw(fields: Dict[str, Any], field_map: FieldMap) -> Dict[str, Any]:
    """
    Maps named attributes onto Baserow field identifiers for a create/update.

    Option fields are written by label, link fields as a list of labels.
    Image fields are read-only here (Baserow needs an uploaded file name).
    Unknown names pass through unchanged.
    """
    payload: Dict[str, Any] = {}
    for name, value in fields.items():
        if name == "id" or value is None:
            continue
        spec = field_map.spec_for(name)
        if spec is None:
            payload[name] = value
            continue
        if spec.kind is FieldKind.IMAGE:
            continue
        if spec.kind is FieldKind.BOOLEAN:
            payload[spec.field] = value is True or str(value).strip().lower() in ("yes", "true", "1")
        elif spec.kind is FieldKind.LINK:
            payload[spec.field] = split_labels(value)
        elif spec.kind in (FieldKind.NUMBER, FieldKind.OPTIONAL_NUMBER):
            payload[spec.field] = value
        else:
            payload[spec.field] = str(value)
    return payload


def to_category(raw: Dict[str, Any], schema: CategorySchema) -> Category:
    is_active = raw.get(schema.is_active)
    return Category(
        id=raw.get("id"),
        code=raw.get(schema.code) or "",
        name=raw.get(schema.name) or "",
        parent_code=raw.get(schema.parent_code) or "",
        is_active=is_active is True or str(is_active) == "1",
    )


def is_root_category(category: Category) -> bool:
    return (
        category.parent_code == MAIN_CATALOG_CODE
        or category.code == BUILDBOX_CATALOG_CODE
        or (category.parent_code != "" and not category.parent_code.startswith(ROOT_CATALOG_PREFIX))
    )


def build_category_tree(categories: List[Category]) -> List[CategoryTreeNode]:
    """Active roots with one level of children, both sorted by name."""
    active = [c for c in categories if c.is_active]

    roots: List[Category] = []
    seen_codes = set()
    for category in active:
        if is_root_category(category) and category.code not in seen_codes:
            seen_codes.add(category.code)
            roots.append(category)
    roots.sort(key=lambda c: c.name.lower())

    tree = []
    for root in roots:
        children = sorted(
            (c for c in active if c.parent_code == root.code),
            key=lambda c: c.name.lower(),
        )
        summaries = [
            SubcategorySummary(name=c.name, code=c.code, product_count=c.product_count)
            for c in children
        ]
        tree.append(CategoryTreeNode(
            name=root.name,
            code=root.code,
            product_count=root.product_count + sum(c.product_count for c in children),
            subcategories=[c.name for c in children],
            subcategories_with_counts=summaries,
        ))
    return tree


def _format_distinct(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class BaserowService:
    """
    Client for one Baserow products table plus its categories table.

    The HTTP transport is injected (anything with a `requests.Session`-like
    `request()` method) so tests can substitute a fake.
    """
    def __init__(
        self,
        base_url: str,
        token: str,
        table_id: str,
        field_map: FieldMap,
        category_table_id: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        if not base_url or not table_id:
            raise ValueError("Baserow URL and table id are required.")
        self.base_url = base_url.rstrip("/")
        self.rows_endpoint = f"{self.base_url}/api/database/rows/table/{table_id}/"
        self.categories_endpoint = (
            f"{self.base_url}/api/database/rows/table/{category_table_id}/" if category_table_id else None
        )
        self.headers = {"Authorization": f"Token {token}", "Content-Type": "application/json"}
        self.field_map = field_map
        self.session = session or requests.Session()
        self.timeout = timeout

    # -------------------- internal helpers --------------------
    def _request(self, method: str, url: str, params: Optional[Dict[str, Any]] = None,
                 json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = self.session.request(
                method, url, headers=self.headers, params=params, json=json, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            body = e.response.text if e.response is not None else ""
            raise BaserowAPIError(f"Baserow {method} {url} returned {status}: {body}", status_code=status) from e
        except requests.exceptions.RequestException as e:
            raise BaserowAPIError(f"Baserow {method} {url} failed: {e}") from e

        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise BaserowAPIError(
                f"Baserow {method} {url} returned a non-JSON body", status_code=response.status_code
            ) from e

    def _row_url(self, row_id: int) -> str:
        return f"{self.rows_endpoint}{row_id}/"

    def _iter_pages(self, url: str, page_size: int):
        page = 1
        while True:
            data = self._request("GET", url, params={"page": page, "size": page_size})
            yield data.get("results", [])
            if data.get("next") is None:
                return
            page += 1

    # -------------------- mapping --------------------
    def to_product(self, raw: Dict[str, Any]) -> Product:
        return to_product(raw, self.field_map)

    def field_name_for(self, name: str) -> str:
        return self.field_map.field_name_for(name)

    def build_list_params(
        self,
        page: int = 1,
        size: int = 10,
        search: str = "",
        filters: Optional[Dict[str, str]] = None,
        sort_field: Optional[str] = None,
        sort_direction: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "size": size}
        if search:
            params["search"] = search

        for name, value in (filters or {}).items():
            if value is None or str(value).strip() == "":
                continue
            if name == "category":
                params[f"filter__{self.field_map.category_filter_field}__contains"] = value
            elif self.field_map.is_option_field(name):
                params[f"filter__{self.field_name_for(name)}__value__equal"] = value
            else:
                params[f"filter__{self.field_name_for(name)}__contains"] = value

        if sort_field and sort_direction:
            field_name = self.field_name_for(sort_field)
            params["order_by"] = f"-{field_name}" if sort_direction == "desc" else field_name
        return params

    # -------------------- products --------------------
    def list_products(
        self,
        page: int = 1,
        size: int = 10,
        search: str = "",
        filters: Optional[Dict[str, str]] = None,
        sort_field: Optional[str] = None,
        sort_direction: Optional[str] = None,
    ) -> ProductPage:
        params = self.build_list_params(page, size, search, filters, sort_field, sort_direction)
        try:
            data = self._request("GET", self.rows_endpoint, params=params)
        except BaserowAPIError as e:
            logger.error("Error fetching products params=%s: %s", params, e)
            raise
        return ProductPage(
            results=[self.to_product(row) for row in data.get("results", [])],
            count=data.get("count", 0),
            next=data.get("next"),
            previous=data.get("previous"),
        )

    def get_product(self, product_id: int) -> Product:
        try:
            return self.to_product(self._request("GET", self._row_url(product_id)))
        except BaserowAPIError as e:
            logger.error("Error fetching product %s: %s", product_id, e)
            raise

    def create_product(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        payload = to_raw(fields, self.field_map)
        try:
            created = self._request("POST", self.rows_endpoint, json=payload)
        except BaserowAPIError as e:
            logger.error("Error creating product: %s", e)
            raise
        logger.info("Created product id=%s", created.get("id"))
        return created

    def update_product(self, product_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        payload = to_raw(fields, self.field_map)
        try:
            return self._request("PATCH", self._row_url(product_id), json=payload)
        except BaserowAPIError as e:
            logger.error("Error updating product %s: %s", product_id, e)
            raise

    def delete_product(self, product_id: int) -> bool:
        try:
            self._request("DELETE", self._row_url(product_id))
        except BaserowAPIError as e:
            logger.error("Error deleting product %s: %s", product_id, e)
            raise
        return True

    def delete_products(self, ids: List[int]) -> bool:
        """
        Deletes every id concurrently and waits for all of them.

        Raises BulkDeleteError if any single delete failed. Rows deleted
        before the failure stay deleted.
        """
        ids = list(ids)
        if not ids:
            return True

        failed: Dict[int, Exception] = {}
        deleted: List[int] = []
        with ThreadPoolExecutor(max_workers=min(MAX_DELETE_WORKERS, len(ids))) as pool:
            futures = {row_id: pool.submit(self.delete_product, row_id) for row_id in ids}
            for row_id, future in futures.items():
                try:
                    future.result()
                    deleted.append(row_id)
                except BaserowAPIError as e:
                    failed[row_id] = e

        if failed:
            error = BulkDeleteError(failed, deleted)
            logger.error("Error deleting products: %s", error)
            raise error
        return True

    def list_distinct_values(self, name: str) -> List[str]:
        """Sorted unique non-blank values of one attribute across the first page of rows."""
        try:
            data = self._request("GET", self.rows_endpoint, params={"size": DISTINCT_VALUES_PAGE_SIZE})
            rows = data.get("results", [])

            if self.field_map.is_option_field(name):
                field_name = self.field_name_for(name)
                values = [
                    row.get(field_name).get("value")
                    for row in rows
                    if isinstance(row.get(field_name), dict) and row.get(field_name).get("value")
                ]
            else:
                products = [self.to_product(row) for row in rows]
                values = [getattr(product, name, None) for product in products]

            cleaned = {_format_distinct(v) for v in values if v}
            return sorted(v for v in cleaned if v)
        except Exception as e:
            logger.error("Error fetching unique values for %s: %s", name, e)
            return []

    # -------------------- categories --------------------
    def get_all_categories(self) -> List[Dict[str, Any]]:
        if not self.categories_endpoint:
            logger.warning("No category table configured")
            return []
        rows: List[Dict[str, Any]] = []
        try:
            for page in self._iter_pages(self.categories_endpoint, CATEGORY_PAGE_SIZE):
                rows.extend(page)
        except BaserowAPIError as e:
            logger.error("Error fetching categories: %s", e)
            return []
        return rows

    def get_category_product_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        link_field = self.field_map.category_filter_field
        try:
            for page in self._iter_pages(self.rows_endpoint, CATEGORY_PAGE_SIZE):
                for row in page:
                    links = row.get(link_field)
                    if not isinstance(links, list):
                        continue
                    for link in links:
                        label = link.get("value") if isinstance(link, dict) else None
                        if label:
                            counts[label] = counts.get(label, 0) + 1
        except BaserowAPIError as e:
            logger.error("Error getting category product counts: %s", e)
            return {}
        return counts

    def list_categories(self) -> List[Category]:
        schema = self.field_map.categories
        return [to_category(row, schema) for row in self.get_all_categories()]

    def list_categories_with_subcategories(self, include_counts: bool = False) -> List[CategoryTreeNode]:
        try:
            categories = self.list_categories()
            logger.info("Fetched %d categories", len(categories))
            if include_counts:
                counts = self.get_category_product_counts()
                for category in categories:
                    category.product_count = counts.get(category.code, 0)
            tree = build_category_tree(categories)
        except Exception as e:
            logger.exception("Error building category tree: %s", e)
            tree = []
        return tree or [CategoryTreeNode(**FALLBACK_CATEGORY)]
