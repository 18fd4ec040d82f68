"""Start the FastAPI application"""

import uvicorn

from moodjournal.config import settings


if __name__ == "__main__":
    uvicorn.run(
        "moodjournal.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.backend_reload,
    )
