import logging

from fastapi import FastAPI

from npm_peek.api.packages import router as packages_router
from npm_peek.core.dependencies import get_settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="npm-peek",
    version="0.1.0",
    description="Browse npm package metadata and tarball contents over HTTP.",
)

app.include_router(packages_router, prefix="/packages", tags=["packages"])
logger.info(f"Default registry: {get_settings().default_registry.value}")


@app.get("/health")
async def health() -> dict:
    """
    Lightweight health check endpoint.
    """
    return {"status": "ok"}


if __name__ == "__main__":
    """
    Allow running `python -m npm_peek.main` to start the Uvicorn development server.
    """
    import uvicorn

    uvicorn.run(
        "npm_peek.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
