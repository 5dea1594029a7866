"""
Common configuration loading.
"""
from .manager import ConfigManager
from .models import AppConfig, BackendConfig, RunConfig, ServerConfig
