"""
Configuration Module
====================

Centralized configuration management for the pathfinding lab.
"""

from .settings import (
    Config,
    SearchConfig,
    ReplanConfig,
    EnsembleConfig,
    LearningConfig,
    GridConfig,
    LoggingConfig,
)
from .log_setup import configure_logging, JsonFormatter

__all__ = [
    'Config',
    'SearchConfig',
    'ReplanConfig',
    'EnsembleConfig',
    'LearningConfig',
    'GridConfig',
    'LoggingConfig',
    'configure_logging',
    'JsonFormatter',
]
