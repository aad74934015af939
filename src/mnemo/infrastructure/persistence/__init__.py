# Persistence adapters
from .json_store import JsonStateRepository
from .schemas import StateModel

__all__ = ["JsonStateRepository", "StateModel"]
