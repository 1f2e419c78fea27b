# routes/pages.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from baserow_service import BaserowAPIError, BaserowService
from config import ROOT_DIR
from deps import get_admin_session, get_baserow_service
from services.catalog_view import COLUMNS, PAGE_SIZES
from services.product_form import FORM_SECTIONS, ProductForm, submit_product_form
from services.view_router import AdminSession, View

router = APIRouter(include_in_schema=False)

templates = Jinja2Templates(directory=str(ROOT_DIR / "templates"))


def back_to_index() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


def render_catalog(request: Request, session: AdminSession):
    catalog = session.catalog
    return templates.TemplateResponse(request, "catalog.html", {
        "title": "Product Catalog",
        "catalog": catalog,
        "state": catalog.state,
        "error": catalog.pop_error(),
        "columns": COLUMNS,
        "page_sizes": PAGE_SIZES,
    })


def render_create(request: Request, session: AdminSession, status_code: int = 200):
    return templates.TemplateResponse(request, "create_product.html", {
        "title": "Create New Product",
        "form": session.form or ProductForm(),
        "errors": session.form_errors,
        "message": session.form_message,
        "sections": FORM_SECTIONS,
    }, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def index(request: Request, session: AdminSession = Depends(get_admin_session)):
    if session.view is View.CREATE:
        return render_create(request, session)
    session.catalog.refresh()
    return render_catalog(request, session)


@router.post("/create/save", response_class=HTMLResponse)
async def save_product(
    request: Request,
    session: AdminSession = Depends(get_admin_session),
    service: BaserowService = Depends(get_baserow_service),
):
    if session.view is not View.CREATE:
        return back_to_index()

    submitted = await request.form()
    form = ProductForm(**{k: v for k, v in submitted.items() if isinstance(v, str)})
    session.form = form
    session.form_message = None

    try:
        errors, _ = await run_in_threadpool(submit_product_form, form, service)
    except BaserowAPIError as e:
        session.form_errors = {}
        session.form_message = f"Failed to create product: {e}"
        return render_create(request, session, status_code=502)

    if errors:
        session.form_errors = errors
        return render_create(request, session)

    await run_in_threadpool(session.saved)
    return back_to_index()


@router.post("/create/cancel")
def cancel_create(session: AdminSession = Depends(get_admin_session)):
    session.cancel()
    return back_to_index()
