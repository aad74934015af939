# Application Stats Package
from .metrics_calculator import StatsCalculator
from .service import StatsService

__all__ = ["StatsCalculator", "StatsService"]
