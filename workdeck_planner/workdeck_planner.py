"""
Workdeck Planner — Main Reflex application entry point.

Boot sequence:
    1. _init_planner() — load workdeck.yaml, set up structured file logging
    2. Create rx.App() and register the planner page at /
"""

import logging

import reflex as rx

from workdeck_planner.ui.pages import planner_page

logger = logging.getLogger("workdeck_planner.startup")

# Guard: only initialize once, even if the module is re-imported
_planner_initialized = False


def _init_planner() -> None:
    """Load config and start file logging."""
    global _planner_initialized
    if _planner_initialized:
        return
    _planner_initialized = True

    from workdeck_planner.engine.config import load_config
    from workdeck_planner.engine.logging import init_logging

    config = load_config()
    if config.logging.enabled:
        init_logging(log_dir=config.logging.directory, level=config.logging.level)
    logger.info(f"{config.name} ({config.environment}) using {config.api.base_url}")


_init_planner()

app = rx.App()
app.add_page(planner_page, route="/", title="Workdeck Resource Planner")
