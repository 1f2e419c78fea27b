# routes/catalog.py
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException
from fastapi.responses import RedirectResponse

from deps import get_admin_session
from services.catalog_view import COLUMNS, CatalogView
from services.view_router import AdminSession, View
from utils import get_logger

logger = get_logger("routes")

router = APIRouter(prefix="/catalog", tags=["Catalog"], include_in_schema=False)

COLUMN_FIELDS = {c.field for c in COLUMNS}
SORTABLE_FIELDS = {c.field for c in COLUMNS if c.sortable}
FILTER_OPERATORS = ("contains", "equals", "greater", "less")


def back_to_index() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


def _catalog(session: AdminSession) -> Optional[CatalogView]:
    return session.catalog if session.view is View.CATALOG else None


@router.post("/create")
def request_create(session: AdminSession = Depends(get_admin_session)):
    session.request_create()
    return back_to_index()


@router.post("/search")
def set_search(search: str = Form(""), session: AdminSession = Depends(get_admin_session)):
    if catalog := _catalog(session):
        catalog.state.set_search(search)
    return back_to_index()


@router.post("/category")
def set_category(category: str = Form(""), session: AdminSession = Depends(get_admin_session)):
    if catalog := _catalog(session):
        catalog.state.set_category(category)
    return back_to_index()


@router.post("/page")
def go_to_page(page: int = Form(...), session: AdminSession = Depends(get_admin_session)):
    if catalog := _catalog(session):
        catalog.go_to_page(page)
    return back_to_index()


@router.post("/page/{action}")
def step_page(action: str, session: AdminSession = Depends(get_admin_session)):
    catalog = _catalog(session)
    if catalog is None:
        return back_to_index()
    steps = {
        "first": catalog.first_page,
        "previous": catalog.previous_page,
        "next": catalog.next_page,
        "last": catalog.last_page,
    }
    if action not in steps:
        raise HTTPException(status_code=404, detail=f"Unknown page action '{action}'")
    steps[action]()
    return back_to_index()


@router.post("/page-size")
def set_page_size(size: int = Form(...), session: AdminSession = Depends(get_admin_session)):
    if catalog := _catalog(session):
        try:
            catalog.state.set_page_size(size)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return back_to_index()


@router.post("/sort")
def toggle_sort(field: str = Form(...), session: AdminSession = Depends(get_admin_session)):
    if field not in SORTABLE_FIELDS:
        raise HTTPException(status_code=400, detail=f"Column '{field}' is not sortable")
    if catalog := _catalog(session):
        catalog.state.toggle_sort(field)
    return back_to_index()


@router.post("/filter")
def set_column_filter(
    field: str = Form(...),
    value: str = Form(""),
    operator: str = Form("contains"),
    session: AdminSession = Depends(get_admin_session),
):
    if field not in COLUMN_FIELDS:
        raise HTTPException(status_code=400, detail=f"Unknown column '{field}'")
    if operator not in FILTER_OPERATORS:
        raise HTTPException(status_code=400, detail=f"Unknown filter operator '{operator}'")
    if catalog := _catalog(session):
        catalog.state.set_column_filter(field, value, operator)
    return back_to_index()


@router.post("/filter/remove")
def remove_column_filter(field: str = Form(...), session: AdminSession = Depends(get_admin_session)):
    if catalog := _catalog(session):
        catalog.state.remove_column_filter(field)
    return back_to_index()


@router.post("/filter-row")
def toggle_filter_row(session: AdminSession = Depends(get_admin_session)):
    if catalog := _catalog(session):
        catalog.state.toggle_filter_row()
    return back_to_index()


@router.post("/clear")
def clear_all(session: AdminSession = Depends(get_admin_session)):
    if catalog := _catalog(session):
        catalog.state.clear_all()
    return back_to_index()


@router.post("/select")
def toggle_select(product_id: int = Form(...), session: AdminSession = Depends(get_admin_session)):
    if catalog := _catalog(session):
        catalog.state.toggle_select(product_id)
    return back_to_index()


@router.post("/select-all")
def toggle_select_all(session: AdminSession = Depends(get_admin_session)):
    if catalog := _catalog(session):
        catalog.toggle_select_all()
    return back_to_index()


@router.post("/delete-selected")
def delete_selected(session: AdminSession = Depends(get_admin_session)):
    catalog = _catalog(session)
    if catalog is None:
        return back_to_index()
    count = len(catalog.state.selected)
    if catalog.delete_selected():
        logger.info("Deleted %d selected products", count)
    return back_to_index()
