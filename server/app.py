"""FastAPI application for the diagram store."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from server import diagram_db
from server.config import CORS_ORIGINS, HOST, LOG_LEVEL, PORT
from server.db import init_all
from server.diagram_routes import router as diagram_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database tables on startup."""
    init_all()
    logger.info("Diagram store ready at %s", diagram_db.DIAGRAM_DB_PATH)
    yield


app = FastAPI(
    title="PixieVisio API",
    description="Stores diagrams (nodes and connections) per model id",
    version=VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def malformed_payload_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or incomplete request bodies are a 400, not FastAPI's 422."""
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


# include routes
app.include_router(diagram_router, prefix="/api")


@app.get("/")
def root():
    """Service descriptor."""
    return {
        "status": "ok",
        "version": VERSION,
        "diagram_db": str(diagram_db.DIAGRAM_DB_PATH),
        "endpoints": {
            "health": "/api/health",
            "save": "/api/save",
            "load": "/api/load?modelId=",
            "connections": "/api/connections",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
