"""Configuration module for the identity register."""
from .settings import RegisterConfig, load_settings

__all__ = ["RegisterConfig", "load_settings"]
