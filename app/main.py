import logging
import os

from fastapi import FastAPI

from app.api.directory import router as directory_router
from app.core.dependencies import get_config, get_data_dir

LOG_LEVEL_ENV_VAR = "MCP_DIRECTORY_LOG_LEVEL"

# Configure logging
logging.basicConfig(
    level=os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="MCP Directory",
    version="0.1.0",
    description="Browse MCP packages with their README and security review scores.",
)


@app.on_event("startup")
async def startup_event() -> None:
    """
    Resolve the data directory and configuration, and report where records
    are read from.
    """
    config = get_config()
    records_dir = get_data_dir() / config.records_dir_name
    if records_dir.is_dir():
        logger.info("Serving package records from %s", records_dir)
    else:
        logger.warning("Records directory %s does not exist; the directory will be empty", records_dir)


@app.get("/health")
async def health() -> dict:
    """
    Lightweight health check endpoint.
    """
    return {"status": "ok"}


app.include_router(directory_router, prefix="/api", tags=["directory"])


if __name__ == "__main__":
    """
    Allow running `python app/main.py` to start the Uvicorn development server.
    """
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
