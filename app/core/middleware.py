import logging
import time
from typing import List

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware


logger = logging.getLogger(__name__)


def setup_middleware(app: FastAPI, allow_origins: List[str]) -> None:
    """Configure CORS and per-request access logging."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials="*" not in allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start_time
        logger.info(
            "%s %s - Status: %s - Time: %.4fs",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response
