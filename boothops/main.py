import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import ALLOWED_ORIGINS
from .database import AppBase, engine
from .domain.briefs.router import router as briefs_router
from .domain.contacts.router import router as contacts_router
from .domain.contracts.router import public_router as public_contracts_router
from .domain.contracts.router import router as contracts_router
from .domain.design.router import router as design_router
from .domain.event_forms.router import merge_fields_router as event_form_merge_fields_router
from .domain.event_forms.router import public_router as public_event_forms_router
from .domain.event_forms.router import router as event_forms_router
from .domain.events.router import router as events_router
from .domain.inventory.router import event_router as event_inventory_router
from .domain.inventory.router import groups_router as product_groups_router
from .domain.inventory.router import router as inventory_router
from .domain.invoices.router import public_router as public_invoices_router
from .domain.invoices.router import router as invoices_router
from .domain.leads.router import router as leads_router
from .domain.opportunities.router import router as opportunities_router
from .domain.settings.router import router as settings_router
from .domain.staff_forms.router import public_router as public_staff_forms_router
from .domain.staff_forms.router import router as staff_forms_router
from .domain.tasks.router import router as tasks_router
from .routes.accounts import router as accounts_router
from .routes.auth import router as auth_router
from .routes.locations import router as locations_router
from .routes.users import router as users_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("botocore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        AppBase.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Application database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="BoothOps API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render errors as {"error": message}; dict details are passed through as the body"""
    if isinstance(exc.detail, dict):
        content = dict(exc.detail)
        content.setdefault("error", content.get("message") or "Request failed")
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    elapsed_ms = (time.time() - start) * 1000
    if response.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {response.status_code} ({elapsed_ms:.0f}ms)")
    else:
        logger.info(f"{request.method} {request.url.path} - {response.status_code} ({elapsed_ms:.0f}ms)")
    return response


logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(settings_router)
app.include_router(accounts_router)
app.include_router(contacts_router)
app.include_router(locations_router)
app.include_router(leads_router)
app.include_router(opportunities_router)
app.include_router(event_inventory_router)
app.include_router(event_forms_router)
app.include_router(event_form_merge_fields_router)
app.include_router(events_router)
app.include_router(design_router)
app.include_router(tasks_router)
app.include_router(inventory_router)
app.include_router(product_groups_router)
app.include_router(invoices_router)
app.include_router(contracts_router)
app.include_router(staff_forms_router)
app.include_router(public_invoices_router)
app.include_router(public_contracts_router)
app.include_router(public_staff_forms_router)
app.include_router(public_event_forms_router)
app.include_router(briefs_router)


@app.get("/")
def root():
    return {"message": "BoothOps API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
