import logging
import os

import uvicorn
from fastapi import FastAPI

from statement_segmenter import __version__
from statement_segmenter.api.segment import router as segment_router
from statement_segmenter.logging_config import configure_logging

configure_logging()

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="Statement Segmenter API", version=__version__)
app.include_router(segment_router)


@app.get("/health")
def healthcheck() -> dict[str, object]:
    """Liveness probe used by container orchestrators."""
    return {"ok": True, "status": "healthy"}


def run() -> None:
    """Serve the API with uvicorn; ``PORT`` selects the listening port."""
    port = int(os.getenv("PORT", "3000"))
    LOGGER.info("Segmenter listening on :%s", port)
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=port)


if __name__ == "__main__":
    run()
