from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from app.api import admin, chat, health
from app.core.config import settings
from app.core.errors import ChatbotError, chatbot_error_handler, request_validation_handler
from app.core.logger import logger
from app.db.seed import seed_defaults
from app.db.session import build_engine, build_sessionmaker, init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: one engine (connection pool) per process
    engine = build_engine(settings)
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)
    await init_db(engine)
    if settings.SEED_DEFAULTS:
        async with app.state.sessionmaker() as db:
            await seed_defaults(db)
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.add_exception_handler(ChatbotError, chatbot_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# Include routers
app.include_router(chat.router, prefix=settings.API_V1_STR)
app.include_router(admin.router, prefix=settings.API_V1_STR)
app.include_router(health.router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8080)
