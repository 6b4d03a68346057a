from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.responses import JSONResponse

from poultry_ledger.common.exceptions import AppError
from poultry_ledger.logger_config import logger


def register_error_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, e: AppError):
        logger.warning(f"{request.method} {request.url.path} failed: {e.message}")
        return JSONResponse(
            status_code=e.status_code,
            content={
                "success": False,
                "message": e.message,
                "status_code": e.status_code,
                "error": e.error
            }
        )

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, e: HTTPException):
        return JSONResponse(
            status_code=e.status_code,
            content={
                "success": False,
                "message": e.detail,
                "status_code": e.status_code,
                "error": "HTTP Error"
            }
        )

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, e: Exception):
        # Log the exception with traceback
        logger.exception("Unhandled exception occurred")

        # Handle all other exceptions (coding, DB errors, etc.)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Internal Server Error",
                "details": str(e),
                "status_code": 500
            }
        )
