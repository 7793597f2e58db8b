import traceback
from fastapi import Request
from fastapi.responses import JSONResponse

from flashcoach.utils.errors import FlashcoachError
from flashcoach.utils.logger import logger


async def log_exceptions(request: Request, call_next):
    try:
        return await call_next(request)

    except Exception:
        logger.error("=== GLOBAL ERROR ===")
        logger.error(f"Path: {request.url.path}")
        logger.error(traceback.format_exc())

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )


async def flashcoach_error_handler(request: Request, exc: FlashcoachError):
    logger.warning(f"[ERROR] {request.url.path} → {exc.code}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code}
    )
