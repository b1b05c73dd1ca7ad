import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from boohk.routes import (
    auth_router,
    admin_users_router,
    account_router,
    clients_router,
    products_router,
    quotations_router,
    cost_estimates_router,
    proposals_router,
    bookings_router,
    collectibles_router,
    job_orders_router,
    logistics_router,
    service_assignments_router,
    notifications_router,
    fleet_router,
    assistant_router,
    weather_router,
    search_router,
    maps_router,
    files_router,
    business_router,
    reports_router,
)
from boohk.background_jobs import scheduler
from boohk.database import init_db, DATABASE_URL

# Create FastAPI app
app = FastAPI(
    title="Boohk",
    description="Out-of-home advertising operations",
    version="1.0.0"
)

# Include routers
app.include_router(auth_router)
app.include_router(admin_users_router)
app.include_router(account_router)
app.include_router(clients_router)
app.include_router(products_router)
app.include_router(quotations_router)
app.include_router(cost_estimates_router)
app.include_router(proposals_router)
app.include_router(bookings_router)
app.include_router(collectibles_router)
app.include_router(job_orders_router)
app.include_router(logistics_router)
app.include_router(service_assignments_router)
app.include_router(notifications_router)
app.include_router(fleet_router)
app.include_router(assistant_router)
app.include_router(weather_router)
app.include_router(search_router)
app.include_router(maps_router)
app.include_router(files_router)
app.include_router(business_router)
app.include_router(reports_router)


@app.on_event("startup")
def on_startup():
    """Create tables and start background jobs. Fails loudly if the database
    cannot be initialized.
    """
    logger.info(f"Starting Boohk with database {DATABASE_URL.split('@')[-1]}")
    init_db()
    scheduler.start()


@app.on_event("shutdown")
def on_shutdown():
    scheduler.stop()


@app.get("/health")
async def health():
    return {"status": "ok"}


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Missing or ill-typed parameters are client errors."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", []) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(status_code=400, content={"error": "; ".join(messages) or "Invalid request"})


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("boohk.main:app", host="0.0.0.0", port=8000, reload=True)
