"""
Engine Factory
Centralizes wiring the repository and engine from configuration.
"""

import random

from mnemo.application.config import AppConfig
from mnemo.application.engine import StudyEngine
from mnemo.application.stats import StatsService
from mnemo.domain.ports import StateRepository
from mnemo.infrastructure.persistence import JsonStateRepository


def get_state_repository(config: AppConfig) -> StateRepository:
    """
    Returns the StateRepository implementation for the configured data file.
    """
    return JsonStateRepository(
        data_file=config.data_file,
        backup_dir=config.backup_dir,
        backup_on_save=config.backup_on_save,
    )


def get_study_engine(config: AppConfig) -> StudyEngine:
    """
    Loads the state and builds the engine the driver holds for its lifetime.
    """
    rng = random.Random(config.shuffle_seed)
    return StudyEngine.open(
        get_state_repository(config),
        rng=rng,
        failed_delay_minutes=config.failed_review_delay_minutes,
    )


def get_stats_service(config: AppConfig) -> StatsService:
    """Read-only reporting over the stored collection."""
    return StatsService(get_state_repository(config))
