"""Entrypoint: python -m chat_hub"""
from __future__ import annotations

import uvicorn

from chat_hub.config import settings
from chat_hub.log_config import configure_logging


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "chat_hub.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
        ws_ping_interval=settings.WS_HEARTBEAT_SECONDS,
    )


if __name__ == "__main__":
    main()
