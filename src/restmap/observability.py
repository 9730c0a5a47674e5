from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_configured = False


def setup_logging(level: str = "INFO", fmt: str = "rich") -> None:
    """Install one root handler. Later calls only change the level."""
    global _configured
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _configured:
        return

    if fmt == "rich":
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True), show_path=False, rich_tracebacks=True
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logging.root.addHandler(handler)
    _configured = True
