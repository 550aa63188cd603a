"""Configuration for LookML Transfer Tool."""

from .config import Config, GitHubConfig, InstanceConfig, LoggingConfig, TransferSettings

__all__ = ['Config', 'GitHubConfig', 'InstanceConfig', 'LoggingConfig', 'TransferSettings']
