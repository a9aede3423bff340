"""Process entry point: ``planning-poker`` or ``python -m planning_poker.main``."""
from __future__ import annotations

import uvicorn

from .app import create_app
from .config import Settings
from .logging_config import setup_logging


def main() -> None:
    settings = Settings.from_env()
    setup_logging(log_level=settings.log_level, log_file=settings.log_file)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
