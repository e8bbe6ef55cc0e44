# FastAPI Application Entry Point
from fastapi import FastAPI
import httpx

# Configuration and Observability
from court_case_service.app.config import settings
from court_case_service.app.observability import setup_opentelemetry, logger

# Initialize OpenTelemetry
setup_opentelemetry(service_name=settings.SERVICE_NAME_API)

# Import instrumentors after OTel SDK is initialized
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.pymongo import PymongoInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

from court_case_service.infrastructure.database import connection
from court_case_service.infrastructure.database.case_store import ensure_case_indexes
from court_case_service.infrastructure.kafka.producer import startup_kafka_producer, shutdown_kafka_producer

# API Routers
from court_case_service.app.api.v1.endpoints import health as health_router
from court_case_service.app.api.v1.endpoints import cases as cases_router

# --- FastAPI Application Instance ---
app = FastAPI(
    title="Court Case Service",
    description="Registers court cases and drives them through judge assignment, hearings, orders and status changes.",
    version="1.0.0"
)

# --- Event Handlers for DB Connection & OTel Instrumentation ---
@app.on_event("startup")
async def startup_event():
    logger.info("FastAPI application startup...")
    try:
        app.state.http_client = httpx.AsyncClient(timeout=settings.DEFAULT_HTTP_TIMEOUT)
        HTTPXClientInstrumentor().instrument()
        logger.info(f"HTTPX AsyncClient initialized with timeout {settings.DEFAULT_HTTP_TIMEOUT} and instrumented.")

        await connection.connect_to_mongo()
        await ensure_case_indexes(connection.db)
        logger.info("MongoDB connection established and case indexes ensured.")

        PymongoInstrumentor().instrument()
        logger.info("PyMongo instrumentation complete.")

        if settings.CASE_EVENTS_ENABLED:
            await startup_kafka_producer()
            logger.info("Kafka Producer polling started.")
        else:
            logger.info("Case event publishing disabled; Kafka Producer not started.")

    except Exception as e:
        logger.error(f"Failed during startup: {e}", exc_info=True)
        raise

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("FastAPI application shutdown...")

    if getattr(app.state, 'http_client', None):
        await app.state.http_client.aclose()
        logger.info("HTTPX AsyncClient closed.")

    await shutdown_kafka_producer()

    connection.close_mongo_connection()

FastAPIInstrumentor.instrument_app(app)
logger.info("FastAPI instrumentation complete.")

# Include API Routers
app.include_router(health_router.router)
app.include_router(cases_router.router, prefix="/api/v1")

logger.info("API routers included. Application setup complete.")

# To run: uvicorn court_case_service.app.main:app --reload --port 8000
