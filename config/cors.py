from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.config import settings


def configure_cors(app: FastAPI) -> None:
    # Content-Disposition must be exposed so browsers can read the export filename
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )
