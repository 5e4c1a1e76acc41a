"""Configuration package for runtime settings, logging and startup validation."""

from .logging import config_bind_execution_id, config_configure_logging, config_reset_execution_id
from .settings import AppSettings, SettingsLoadError, config_load_database_url, config_load_settings

__all__ = [
	"AppSettings",
	"SettingsLoadError",
	"config_bind_execution_id",
	"config_configure_logging",
	"config_load_database_url",
	"config_load_settings",
	"config_reset_execution_id",
]
