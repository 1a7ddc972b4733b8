# logger.py
"""
Logging configuration for the Badminton App.

This module provides centralized logging setup. The setup_logging() function
should be called once at application startup (e.g., in 1_Players.py).

All app modules should use the "app" namespace:
    import logging
    logger = logging.getLogger("app.module_name")

This keeps third-party library logs quiet while allowing granular control
over the app's own logging level via the LOG_LEVEL environment variable.
"""

import logging
import os
import sys

from app_types import GroupScore

# App namespace prefix - all app loggers should use this
APP_LOGGER_NAME = "app"


def level_from_env(default: int = logging.INFO) -> int:
    """Reads the app log level from LOG_LEVEL, falling back to default."""
    name = os.environ.get("LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else default
    # getLevelName returns a string for unknown names
    return level if isinstance(level, int) else default


def setup_logging(app_level: int = logging.INFO) -> None:
    """
    Configure logging for the application.

    - Root logger is set to WARNING (keeps third-party libraries quiet)
    - App namespace logger ("app.*") is set to the specified level

    This should be called ONCE at application startup (entry point).

    Args:
        app_level: The logging level for app modules (default: INFO)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)

    # Streamlit reruns the entry script, so avoid duplicate handlers
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)  # Handler accepts all; loggers filter

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(app_level)


def log_recommendation_debug(
    logger: logging.Logger,
    pool_size: int,
    groups_searched: int,
    best_names: list[str],
    best_score: GroupScore,
) -> None:
    """
    Log recommender debug information in a consistent format.

    Args:
        logger: Logger instance to use
        pool_size: Number of players in the candidate pool
        groups_searched: Number of 4-player groups scored
        best_names: Names of the winning group
        best_score: Score breakdown of the winning group
    """
    logger.debug("Candidate Pool Size: %s", pool_size)
    logger.debug("Groups Searched: %s", groups_searched)
    logger.debug("Best Group: %s", best_names)
    logger.debug("Games Term: %s", best_score.games)
    logger.debug("Level Term: %s", best_score.level)
    logger.debug("Gender Term: %s", best_score.gender)
    logger.debug("Partner Term: %s", best_score.partner)
    logger.debug("History Term: %s", best_score.history)
    logger.debug("Objective Value: %s", best_score.total)
