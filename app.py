"""
FastAPI application proxying name, prompt and image generation to a hosted
AI inference platform.

Endpoints:
- POST /generate-name            fantasy "Firstname Lastname"
- POST /prompt-enhancer          style/mood-driven prompt rewriting
- POST /generate-image           text-to-image, returned as a data URI
- POST /generate-enhanced-image  enhancer chained into text-to-image
- POST /generate-dual-image      character sheet -> portrait + full-body images
- GET  *                         welcome message
- OPTIONS *                      CORS preflight (204)

Every response, including errors, carries Access-Control-Allow-Origin and
errors are rendered as {"error": message}.
"""
import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Config
from common.error_messages import ErrorCode, ServiceError, get_error_response
from common.routes import health_router, fallback_router
from names.routes import router as names_router
from prompts.routes import router as prompts_router
from image.routes import router as image_router
from utils.logger import get_logger

# Initialize logger
logger = get_logger("main")

CORS_ALLOW_METHODS = "GET, POST, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type"

# Validate configuration on startup
try:
    Config.validate()
    logger.info("Configuration validated successfully")
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    logger.error("Please set required environment variables in .env file")

# Create FastAPI app
app = FastAPI(
    title="Army of Me AI Service",
    description="Name generation, prompt enhancement and image generation over a hosted inference platform.",
    version="1.0.0"
)

# Resolved once at process start; middleware and handlers read it from app state
app.state.allowed_origin = Config.ALLOWED_ORIGIN


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Render handler failures as {"error": message}."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON or wrongly typed fields."""
    errors = exc.errors()
    detail = None
    if errors:
        first = errors[0]
        location = ".".join(part for part in first.get("loc", ()) if isinstance(part, str) and part != "body")
        detail = f"{location}: {first.get('msg')}" if location else first.get("msg")
    message, status_code = get_error_response(ErrorCode.INVALID_FORMAT, detail)
    logger.warning(f"{request.method} {request.url.path} rejected: {message}")
    return error_response(message, status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(str(exc.detail), exc.status_code)


# Request logging middleware; also the last line of defence for unexpected errors
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every HTTP request with timing and turn uncaught exceptions into 500s."""
    start_time = time.time()
    full_url = str(request.url)
    logger.info(f"→ {request.method} {full_url} - Client: {request.client.host if request.client else 'unknown'}")

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = (time.time() - start_time) * 1000
        logger.error(f"← {request.method} {full_url} - Error: {e} - Time: {process_time:.2f}ms", exc_info=True)
        message = str(e) or get_error_response(ErrorCode.UNKNOWN_ERROR)[0]
        return error_response(message, 500)

    process_time = (time.time() - start_time) * 1000
    logger.info(f"← {request.method} {full_url} - Status: {response.status_code} - Time: {process_time:.2f}ms")
    return response


# CORS gate - added last so it wraps every response, including the logging middleware's 500s
@app.middleware("http")
async def cors_gate(request: Request, call_next):
    """Answer preflights with 204 and stamp the allowed origin on everything else."""
    origin = request.app.state.allowed_origin
    if request.method == "OPTIONS":
        return Response(
            status_code=204,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
                "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
            },
        )

    response = await call_next(request)
    response.headers["Access-Control-Allow-Origin"] = origin
    return response

logger.info(f"CORS gate configured for origin {Config.ALLOWED_ORIGIN}")

# Include routers
app.include_router(health_router)
app.include_router(names_router)
app.include_router(prompts_router)
app.include_router(image_router)
logger.info("Generation routers included")

# Catch-all routes must come after every real endpoint
app.include_router(fallback_router)


@app.on_event("startup")
async def startup_event():
    """Log startup event."""
    logger.info("=" * 80)
    logger.info("Army of Me AI Service starting up")
    logger.info(f"Inference backend: {Config.INFERENCE_BACKEND}")
    logger.info(f"Host: {Config.HOST}:{Config.PORT}")
    logger.info("=" * 80)


@app.on_event("shutdown")
async def shutdown_event():
    """Log shutdown event."""
    logger.info("Army of Me AI Service shutting down")


# Run server directly
if __name__ == "__main__":
    logger.info(f"Starting server on {Config.HOST}:{Config.PORT}")
    uvicorn.run(
        "app:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=True,
        log_level="info"
    )
