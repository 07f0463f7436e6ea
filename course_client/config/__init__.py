"""Configuration package exports."""

from .loader import load_settings
from .model import ClientSettings, normalize_server_url

__all__ = ["ClientSettings", "load_settings", "normalize_server_url"]
