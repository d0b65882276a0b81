import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.dependencies.supabase import close_async_supabase, init_async_supabase
from app.routers import games, ws
from app.services.game.persistence import get_game_persistence
from app.services.websocket.manager import get_connection_manager

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting GridClash API")
    logger.debug("Debug mode: %s", settings.DEBUG)

    await init_async_supabase()

    # Durable writes after moves go through the persistence worker
    persistence = get_game_persistence()
    await persistence.start_worker()
    logger.info("Persistence worker started")

    connection_manager = get_connection_manager()
    await connection_manager.start_cleanup_task()
    logger.info("WebSocket connection manager initialized")

    yield

    # Shutdown: close sockets first so no new moves arrive, then flush writes
    logger.info("Shutting down GridClash API")
    await connection_manager.stop_cleanup_task()
    await connection_manager.close_all_connections()
    await persistence.stop_worker()
    if persistence.failed_writes:
        logger.warning("%d game state writes were dropped", persistence.failed_writes)
    await close_async_supabase()
    logger.info("WebSocket, persistence and Supabase cleanup complete")


app = FastAPI(
    title="GridClash API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
logger.debug("CORS configured with origins: %s", settings.CORS_ORIGINS)

app.include_router(games.router)
app.include_router(ws.router)
logger.debug("Routers registered: /create-game, /game/{game_id}, /generate-invite, /ws")


@app.get("/")
def root():
    return {"message": "GridClash API"}


@app.get("/health")
def health():
    return {"status": "healthy"}
