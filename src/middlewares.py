"""
FileNote Middlewares
HTTP 요청/응답 처리를 위한 미들웨어
"""

import logging
import time
import uuid

from fastapi import Request


logger = logging.getLogger(__name__)


async def log_requests(request: Request, call_next):
    """
    X-Request-ID 를 보장하고 /api 요청의 처리 결과를 한 줄로 기록
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = int((time.perf_counter() - start) * 1000)

    response.headers["X-Request-ID"] = request_id
    if request.url.path.startswith("/api"):
        logger.info(f"{request.method} {request.url.path} {response.status_code} in {duration_ms}ms")

    return response
