# bootstrap/config/__init__.py
"""
Bootstrap Configuration Module

Caller-facing bootstrap parameters and the loader for global settings.
"""

from configs.config_loader import ConfigLoader
from .bootstrap_config import BootstrapConfig

__all__ = ['BootstrapConfig', 'ConfigLoader']
