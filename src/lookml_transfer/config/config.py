"""Configuration management for LookML Transfer Tool."""

from typing import Optional, Dict, Any, List
from pathlib import Path
import os

from pydantic import BaseModel, Field, SecretStr, validator
import yaml
from dotenv import load_dotenv


class InstanceConfig(BaseModel):
    """Configuration for a Looker instance."""

    url: str = Field(..., description='Looker instance URL')
    client_id: str = Field(..., description='API3 client id')
    client_secret: SecretStr = Field(..., description='API3 client secret')
    api_version: str = Field(default='4.0', description='Looker API version')
    timeout: int = Field(default=30, description='Request timeout in seconds')

    @validator('url')
    def validate_url(cls, v):
        """Validate Looker URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')

    @validator('client_id')
    def validate_client_id(cls, v):
        """Validate client id is not blank."""
        if not v.strip():
            raise ValueError('client_id must not be empty')
        return v

    @validator('client_secret')
    def validate_client_secret(cls, v):
        """Validate client secret is not blank."""
        if not v.get_secret_value().strip():
            raise ValueError('client_secret must not be empty')
        return v

    @validator('timeout')
    def validate_timeout(cls, v):
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError('Timeout must be positive')
        return v

    @property
    def api_url(self) -> str:
        """Base URL of the versioned REST API."""
        return f'{self.url}/api/{self.api_version}'


class GitHubConfig(BaseModel):
    """Configuration for the GitHub host receiving deploy keys."""

    token: SecretStr = Field(..., description='Personal access token with admin scope')
    api_url: str = Field(
        default='https://api.github.com', description='GitHub REST API URL'
    )
    timeout: int = Field(default=30, description='Request timeout in seconds')

    @validator('token')
    def validate_token(cls, v):
        """Validate token is not blank."""
        if not v.get_secret_value().strip():
            raise ValueError('GitHub token must not be empty')
        return v

    @validator('api_url')
    def validate_api_url(cls, v):
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')


class TransferSettings(BaseModel):
    """Transfer workflow settings."""

    max_attempts: int = Field(
        default=3, description='Attempts allowed for git branch creation'
    )
    retry_delays: List[float] = Field(
        default_factory=lambda: [20.0, 60.0, 120.0],
        description='Seconds to wait after each failed branch attempt',
    )
    branch_prefix: str = Field(
        default='lookml_transfer_', description='Prefix for transfer branch names'
    )
    dev_workspace: str = Field(
        default='dev', description='Session workspace used for project changes'
    )

    @validator('max_attempts')
    def validate_max_attempts(cls, v):
        """Validate max attempts is positive."""
        if v <= 0:
            raise ValueError('Max attempts must be positive')
        return v

    @validator('retry_delays')
    def validate_retry_delays(cls, v, values):
        """Ensure there is a delay for every retry."""
        if any(delay < 0 for delay in v):
            raise ValueError('Retry delays must not be negative')
        max_attempts = values.get('max_attempts', 3)
        if len(v) < max_attempts - 1:
            raise ValueError(
                f'retry_delays needs at least {max_attempts - 1} entries'
            )
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default='INFO', description='Log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: Optional[str] = Field(
        default=None, description='Log format (defaults to the component format)'
    )

    @validator('level')
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class for LookML Transfer Tool."""

    source: InstanceConfig = Field(..., description='Source Looker instance')
    target: InstanceConfig = Field(..., description='Target Looker instance')
    github: GitHubConfig = Field(..., description='GitHub host settings')
    transfer: TransferSettings = Field(
        default_factory=TransferSettings, description='Transfer settings'
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    class Config:
        """Pydantic configuration."""

        extra = 'forbid'  # Don't allow extra fields

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Load configuration from YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        return cls(**(config_data or {}))

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        # Load .env file if it exists
        load_dotenv()

        config_data = {
            'source': {
                'url': os.getenv('LOOKER_SOURCE_URL'),
                'client_id': os.getenv('LOOKER_SOURCE_CLIENT_ID'),
                'client_secret': os.getenv('LOOKER_SOURCE_CLIENT_SECRET'),
            },
            'target': {
                'url': os.getenv('LOOKER_TARGET_URL'),
                'client_id': os.getenv('LOOKER_TARGET_CLIENT_ID'),
                'client_secret': os.getenv('LOOKER_TARGET_CLIENT_SECRET'),
            },
            'github': {
                'token': os.getenv('GITHUB_TOKEN'),
                'api_url': os.getenv('GITHUB_API_URL'),
            },
            'transfer': {
                'branch_prefix': os.getenv('TRANSFER_BRANCH_PREFIX'),
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL', 'INFO'),
                'file': os.getenv('LOG_FILE'),
            },
        }

        # Remove None values
        config_data = cls._remove_none_values(config_data)

        return cls(**config_data)

    @staticmethod
    def _remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: Config._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    @staticmethod
    def create_template(output_path: str) -> None:
        """Create a configuration template file."""
        template_config = {
            'source': {
                'url': 'https://source.looker.example.com',
                'client_id': 'your-source-client-id',
                'client_secret': 'your-source-client-secret',
                'api_version': '4.0',
                'timeout': 30,
            },
            'target': {
                'url': 'https://target.looker.example.com',
                'client_id': 'your-target-client-id',
                'client_secret': 'your-target-client-secret',
                'api_version': '4.0',
                'timeout': 30,
            },
            'github': {
                'token': 'your-github-personal-access-token',
                'api_url': 'https://api.github.com',
                'timeout': 30,
            },
            'transfer': {
                'max_attempts': 3,
                'retry_delays': [20, 60, 120],
                'branch_prefix': 'lookml_transfer_',
                'dev_workspace': 'dev',
            },
            'logging': {
                'level': 'INFO',
                'file': 'transfer.log',
                'format': (
                    '{time:YYYY-MM-DD HH:mm:ss} | {level} | '
                    '{extra[component]} | {message}'
                ),
            },
        }

        config_file = Path(output_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                template_config, f, default_flow_style=False, indent=2, sort_keys=False
            )
