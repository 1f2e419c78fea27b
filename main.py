# main.py
import sys
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent
sys.path.append(str(ROOT_DIR))

from config import get_settings
from routes import catalog, categories, pages, products
from services.view_router import sessions
from utils import configure_logging

load_dotenv()

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title="Product Catalog")

app.mount("/static", StaticFiles(directory=str(ROOT_DIR / "static")), name="static")


@app.middleware("http")
async def add_session_middleware(request: Request, call_next):
    if request.url.path.startswith("/static/"):
        return await call_next(request)
    settings = get_settings()
    cookie_name = settings.session_cookie
    session_id = request.cookies.get(cookie_name)
    is_new = not session_id
    if is_new:
        session_id = sessions.new_id()
    request.state.session_id = session_id
    response = await call_next(request)
    if is_new:
        response.set_cookie(
            key=cookie_name,
            value=session_id,
            httponly=True,
            samesite="lax",
            max_age=settings.session_max_age,
            secure=settings.session_cookie_secure,
        )
    return response


# Routers
app.include_router(pages.router)
app.include_router(catalog.router)
app.include_router(products.router)
app.include_router(categories.router)
