"""Configuration management with Pydantic models."""

from .settings import DEFAULT_API_PATH, DEFAULT_SERVICE_URL, ExporterSettings, ExportOptions
from .target import Target

__all__ = ["ExporterSettings", "ExportOptions", "Target", "DEFAULT_SERVICE_URL", "DEFAULT_API_PATH"]
