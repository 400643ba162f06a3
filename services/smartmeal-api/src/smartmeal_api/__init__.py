"""SmartMeal API - profiles, calorie recommendations and generated meal menus"""

import logging

logger = logging.getLogger("smartmeal")


def configure_logging(level_name: str = "INFO") -> None:
    """Configure root logging once for the service."""
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
