from __future__ import annotations

import os

import uvicorn

from ..logging_setup import setup_logging
from ..settings import get_settings
from .main import create_app


def main() -> None:
    """Run the reference service: python -m task_tracker.server"""
    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
