from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from settings.config import settings
from db.db_operation import create_indexes
from core.exceptions import global_exception_handler, http_exception_handler, validation_exception_handler
from core.middleware import TelemetryMiddleware
from services.metrics_service import metrics
from services.user_service import ensure_default_admin
from utils.log_shipper import log_shipper
from utils.logger import get_logger
from routes import auth, user_routes, franchise_routes, order_route, docs_routes

logger = get_logger("main")

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

@app.on_event("startup")
async def startup_event():
    await create_indexes()
    await ensure_default_admin()
    metrics.start_periodic_reporting()
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")

@app.on_event("shutdown")
async def shutdown_event():
    await metrics.stop_periodic_reporting()
    await log_shipper.drain()

app.add_middleware(TelemetryMiddleware)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(docs_routes.router)
app.include_router(auth.router)
app.include_router(user_routes.router)
app.include_router(franchise_routes.router)
app.include_router(order_route.router)
