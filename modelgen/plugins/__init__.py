"""Feature plugins for the generated project."""

from .base import FeaturePlugin, HealthCheckSection, PluginContext, PluginKind, PluginOutput, PluginValidation
from .google_auth import GoogleAuthPlugin
from .manager import BUILTIN_PLUGINS, GenerationReport, PluginManager
from .s3_storage import S3StoragePlugin

__all__ = [
    "FeaturePlugin",
    "PluginKind",
    "PluginContext",
    "PluginValidation",
    "PluginOutput",
    "HealthCheckSection",
    "PluginManager",
    "GenerationReport",
    "BUILTIN_PLUGINS",
    "GoogleAuthPlugin",
    "S3StoragePlugin",
]
