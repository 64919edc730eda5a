import logging

from fastapi.responses import JSONResponse

log = logging.getLogger("revenda.errors")


def error(message: str, code: str = "error", status: int = 400):
    return JSONResponse(
        status_code=status,
        content={
            "ok": False,
            "error": code,
            "message": message,
        },
    )


def fail(exc: Exception, code: str = "error"):
    """
    Domain errors carry message + status_code; anything else is a 500
    with no internals in the body.
    """
    status = getattr(exc, "status_code", None)
    message = getattr(exc, "message", None)
    if isinstance(status, int) and message:
        return error(message, code, status)
    log.exception("Unhandled error", exc_info=exc)
    return error("Internal server error", "internal_error", 500)
