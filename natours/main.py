import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import uvicorn

from natours import models  # noqa: F401  registers every table on Base.metadata
from natours.config import settings
from natours.core.error_handlers import register_error_handlers
from natours.core.middleware import BodySizeLimitMiddleware, RateLimitMiddleware, RequestLoggingMiddleware
from natours.database import Base, engine
from natours.routers import auth, reviews, tours, users


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# The middleware added last runs first: CORS, logging, body cap, then the rate limiter
app.add_middleware(RateLimitMiddleware)
app.add_middleware(BodySizeLimitMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers. Auth comes first so /users/login etc. win over /users/{id}
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(tours.router)
app.include_router(reviews.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy", "service": "natours_api"}


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        "natours.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
        loop="asyncio",  # Explicitly use asyncio instead of auto (which tries uvloop)
    )
