import logging
from typing import Optional, Union


def setup_logging(level: Optional[Union[int, str]] = None) -> None:
    """Configure global logging once for the application.

    Args:
        level: Optional logging level name or number. Defaults to ``logging.INFO``.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.basicConfig(
        level=level or logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
