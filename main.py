import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.database import engine
from core.errors import ServiceError
from core.security import token_registry
from models.base import Base

from routers.auth import router as auth_router
from routers.users import router as users_router
from routers.matches import router as matches_router
from routers.messages import router as messages_router
from routers.health import router as health_router

app = FastAPI(
    title="Swipematch Backend",
    version="0.1.0",
    description="Swipe matching, friends and direct messages",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger("uvicorn.error")


@app.middleware("http")
async def log_request_time(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} completed in {process_time:.2f} ms"
    )
    return response


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_detail})


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(matches_router)
app.include_router(messages_router)
app.include_router(health_router)


@app.on_event("startup")
async def on_startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.get("/")
async def root():
    return {"message": "Swipematch Backend"}


@app.on_event("shutdown")
async def shutdown():
    token_registry.clear()
    # close every pooled connection
    await engine.dispose()
