# File: neighbourly/main.py
# Project: neighbourly

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler

from neighbourly.core.config import cors_origins_list
from neighbourly.core.errors import register_error_handlers
from neighbourly.core.log import configure_logging
from neighbourly.core.ratelimit import limiter
from neighbourly.routers import claims, meshblocks

configure_logging()

app = FastAPI(title="Neighbourly API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
def health():
    return {"ok": True}

app.include_router(meshblocks.router)
app.include_router(claims.router)
