# salespivot/config.py

"""
salespivot/config.py

Centralized configuration via environment variables.
Used to keep config in one place so the CLI is easy to run in different environments.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    """
    Settings container (dataclass) loaded from environment variables.
    The from_env class method is responsible for parsing environment variables and constructing the Settings object.
    """
    app_title: str
    dataset_path: str
    spec_path: str

    log_level: int = logging.INFO
    max_render_rows: int = 20  # Max number of rows to render in the CLI tables
    show_segments: bool = True  # Render one sub-table per stacked bucket
    show_fields: bool = False  # Render the field catalog of the dataset before the cards

    @staticmethod
    def _get_int(name: str, default: int) -> int:
        """
        Small helper to safely parse integer env vars.
        """
        raw = os.getenv(name)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            return default

    @staticmethod
    def _get_bool(name: str, default: bool) -> bool:
        """
        Small helper to safely parse boolean env vars.
        """
        raw = os.getenv(name)
        if raw is None:
            return default
        return raw.strip().lower() in ("true", "1", "yes", "y", "on")

    @staticmethod
    def _get_log_level(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None:
            return default
        level = logging.getLevelName(raw.strip().upper())
        return level if isinstance(level, int) else default

    @classmethod
    def from_env(cls) -> Settings:
        """
        Method used to construct Settings from environment variables.
        """
        return cls(
            app_title=os.getenv("APP_TITLE", "Sales Pivot"),
            dataset_path=os.getenv("DATASET_PATH", "sales_records.csv"),
            spec_path=os.getenv("SPEC_PATH", "card.yaml"),
            log_level=cls._get_log_level("LOG_LEVEL", logging.INFO),
            max_render_rows=cls._get_int("MAX_RENDER_ROWS", 20),
            show_segments=cls._get_bool("SHOW_SEGMENTS", True),
            show_fields=cls._get_bool("SHOW_FIELDS", False),
        )


def get_settings() -> Settings:
    """
    Single entry point used by the app.
    """
    return Settings.from_env()
