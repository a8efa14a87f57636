from planner.services import (
    analytics_service,
    catalog_service,
    objective_service,
    week_range_service,
)


__all__ = [
    "analytics_service",
    "catalog_service",
    "objective_service",
    "week_range_service",
]
