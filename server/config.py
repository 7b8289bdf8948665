"""Server settings, read from the environment (and a .env file if present)."""

import os
from pathlib import Path

from dotenv import load_dotenv

# load environment variables before anything below reads them
load_dotenv()

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "visio.db"
DIAGRAM_DB_PATH = Path(os.getenv("DIAGRAM_DB_PATH", str(DEFAULT_DB_PATH)))

# comma-separated values for multiple origins, or "*" for all (development only)
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "5000"))
