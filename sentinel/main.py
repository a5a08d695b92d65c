from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException
from sentinel.api.endpoints import router as api_router
from sentinel.core.config import settings
import logging
import os

logger = logging.getLogger("uvicorn")

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
templates = Jinja2Templates(directory=TEMPLATE_DIR)

ASSET_CACHE_CONTROL = "public, max-age=3600"
CONTENT_SECURITY_POLICY = (
    "default-src 'self' https://appsforoffice.microsoft.com https://office.com; "
    "script-src 'self' https://appsforoffice.microsoft.com"
)

app = FastAPI(title=f"{settings.PROJECT_NAME} Add-in Server", version=settings.VERSION)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
    return response


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "SAMEORIGIN"
    response.headers["Content-Security-Policy"] = CONTENT_SECURITY_POLICY
    return response


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content={"error": "Method Not Allowed"})
    return await http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Error: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error", "message": str(exc)})


# Mount static add-in assets (icons etc.) when present
asset_dir = os.path.abspath(settings.ASSET_DIR)
if os.path.isdir(asset_dir):
    app.mount("/assets", StaticFiles(directory=asset_dir), name="assets")
    logger.info(f"Mounted add-in assets from {asset_dir}")

app.include_router(api_router, prefix="/api")


def _template_context() -> dict:
    base_url = settings.BASE_URL.rstrip("/")
    return {
        "product_name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "base_url": base_url,
        "support_email": settings.SUPPORT_EMAIL,
    }


@app.get("/manifest.xml")
async def serve_manifest(request: Request):
    try:
        return templates.TemplateResponse(
            request,
            "manifest.xml",
            _template_context(),
            media_type="application/xml",
            headers={"Cache-Control": ASSET_CACHE_CONTROL},
        )
    except Exception as e:
        logger.error(f"Error reading manifest: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to load manifest", "message": str(e)})


@app.get("/function-file/function-file.html")
async def serve_function_file(request: Request):
    try:
        return templates.TemplateResponse(
            request,
            "function-file.html",
            _template_context(),
            media_type="text/html; charset=utf-8",
            headers={"Cache-Control": ASSET_CACHE_CONTROL},
        )
    except Exception as e:
        logger.error(f"Error reading function-file.html: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to load function file", "message": str(e)})


@app.get("/scripts/function-file.js")
async def serve_function_script():
    script_path = os.path.join(os.path.abspath(settings.ASSET_DIR), "function-file.js")
    if not os.path.isfile(script_path):
        logger.error(f"Error reading function-file.js: {script_path} not found")
        return JSONResponse(status_code=500, content={"error": "Failed to load script", "message": "function-file.js not found"})
    return FileResponse(
        script_path,
        media_type="application/javascript; charset=utf-8",
        headers={"Cache-Control": ASSET_CACHE_CONTROL},
    )


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }
