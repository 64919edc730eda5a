import logging
import time
from typing import Dict, Any
from fastapi import Request, Response

log = logging.getLogger("revenda.http")

SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "x-admin-token",
    "apikey",
    "x-supabase-key",
}

def mask_headers(headers: Dict[str, str]) -> Dict[str, str]:
    out = {}
    for k, v in headers.items():
        if k.lower() in SENSITIVE_HEADERS:
            out[k] = "***masked***"
        else:
            out[k] = v
    return out

def log_request_response(request: Request, response: Response, start_time: float) -> Dict[str, Any]:
    duration_ms = int((time.monotonic() - start_time) * 1000)

    entry: Dict[str, Any] = {
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": duration_ms,
        "client": request.client.host if request.client else None,
        "headers": mask_headers(dict(request.headers)),
    }

    if response.status_code >= 500:
        log.warning(entry)
    else:
        log.info(entry)
    return entry
