"""Tests for configuration management."""

import pytest
import tempfile
import os

import yaml

from lookml_transfer.config.config import (
    Config,
    GitHubConfig,
    InstanceConfig,
    TransferSettings,
)


def _instance(url='https://source.looker.com', **kwargs):
    return InstanceConfig(url=url, client_id='id', client_secret='secret', **kwargs)


class TestInstanceConfig:
    """Test Looker instance configuration."""

    def test_valid_config(self):
        """Test valid configuration creation."""
        config = InstanceConfig(
            url='https://looker.example.com/',
            client_id='client',
            client_secret='secret',
            timeout=45,
        )

        assert config.url == 'https://looker.example.com'
        assert config.client_id == 'client'
        assert config.client_secret.get_secret_value() == 'secret'
        assert config.api_version == '4.0'
        assert config.timeout == 45
        assert config.api_url == 'https://looker.example.com/api/4.0'

    def test_secret_not_in_repr(self):
        """Test the client secret is masked when printed."""
        config = InstanceConfig(
            url='https://looker.example.com',
            client_id='client',
            client_secret='s3cr3t-value',
        )

        assert 's3cr3t-value' not in repr(config.client_secret)
        assert 's3cr3t-value' not in str(config)

    def test_url_validation(self):
        """Test URL validation."""
        with pytest.raises(ValueError):
            _instance(url='looker.example.com')

    def test_missing_credentials(self):
        """Test that missing credentials raise validation error."""
        with pytest.raises(ValueError):
            InstanceConfig(url='https://looker.example.com', client_id='id')

        with pytest.raises(ValueError):
            InstanceConfig(
                url='https://looker.example.com', client_id='  ', client_secret='s'
            )

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            _instance(timeout=0)

    @pytest.mark.parametrize('secret', ['', '   '])
    def test_blank_client_secret_rejected(self, secret):
        """Test a blank secret fails before any login is attempted."""
        with pytest.raises(ValueError):
            InstanceConfig(
                url='https://looker.example.com',
                client_id='id',
                client_secret=secret,
            )


class TestGitHubConfig:
    """Test GitHub host configuration."""

    @pytest.mark.parametrize('token', ['', '  '])
    def test_blank_token_rejected(self, token):
        with pytest.raises(ValueError):
            GitHubConfig(token=token)

    def test_api_url_trailing_slash_stripped(self):
        config = GitHubConfig(
            token='gh-token', api_url='https://github.example.com/api/v3/'
        )

        assert config.api_url == 'https://github.example.com/api/v3'


class TestTransferSettings:
    """Test transfer workflow settings."""

    def test_defaults(self):
        settings = TransferSettings()

        assert settings.max_attempts == 3
        assert settings.retry_delays == [20.0, 60.0, 120.0]
        assert settings.branch_prefix == 'lookml_transfer_'
        assert settings.dev_workspace == 'dev'

    def test_delays_must_cover_retries(self):
        with pytest.raises(ValueError):
            TransferSettings(max_attempts=5, retry_delays=[1, 2])

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            TransferSettings(retry_delays=[20, -1, 120])


class TestConfig:
    """Test main configuration class."""

    def test_config_creation(self):
        """Test configuration creation with all fields."""
        config = Config(
            source=_instance(),
            target=_instance(url='https://target.looker.com'),
            github=GitHubConfig(token='gh-token'),
        )

        assert config.source.url == 'https://source.looker.com'
        assert config.target.url == 'https://target.looker.com'
        assert config.github.api_url == 'https://api.github.com'
        assert config.transfer.max_attempts == 3
        assert config.logging.level == 'INFO'

    def test_missing_github_token(self):
        """Test the run aborts when the GitHub credential is missing."""
        with pytest.raises(ValueError):
            Config(
                source=_instance(),
                target=_instance(url='https://target.looker.com'),
            )

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValueError):
            Config(
                source=_instance(),
                target=_instance(url='https://target.looker.com'),
                github=GitHubConfig(token='gh-token'),
                destination={},
            )

    def test_config_from_file(self):
        """Test configuration loading from YAML file."""
        config_content = """
source:
  url: https://source.looker.com
  client_id: source-id
  client_secret: source-secret

target:
  url: https://target.looker.com
  client_id: target-id
  client_secret: target-secret
  timeout: 60

github:
  token: gh-token

transfer:
  branch_prefix: moved_
"""

        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(config_content)
            f.flush()

        try:
            config = Config.from_file(f.name)
            assert config.source.client_id == 'source-id'
            assert config.target.timeout == 60
            assert config.github.token.get_secret_value() == 'gh-token'
            assert config.transfer.branch_prefix == 'moved_'
        finally:
            os.unlink(f.name)

    def test_config_from_env(self, monkeypatch):
        """Test configuration loading from environment variables."""
        env_vars = {
            'LOOKER_SOURCE_URL': 'https://source.looker.com',
            'LOOKER_SOURCE_CLIENT_ID': 'source-id',
            'LOOKER_SOURCE_CLIENT_SECRET': 'source-secret',
            'LOOKER_TARGET_URL': 'https://target.looker.com',
            'LOOKER_TARGET_CLIENT_ID': 'target-id',
            'LOOKER_TARGET_CLIENT_SECRET': 'target-secret',
            'GITHUB_TOKEN': 'gh-token',
        }
        for key, value in env_vars.items():
            monkeypatch.setenv(key, value)
        monkeypatch.setattr(
            'lookml_transfer.config.config.load_dotenv', lambda: None
        )

        config = Config.from_env()

        assert config.source.url == 'https://source.looker.com'
        assert config.target.client_id == 'target-id'
        assert config.github.token.get_secret_value() == 'gh-token'
        assert config.transfer.branch_prefix == 'lookml_transfer_'

    def test_config_from_env_empty_github_token(self, monkeypatch):
        """Test an empty GITHUB_TOKEN is rejected like a missing one."""
        env_vars = {
            'LOOKER_SOURCE_URL': 'https://source.looker.com',
            'LOOKER_SOURCE_CLIENT_ID': 'source-id',
            'LOOKER_SOURCE_CLIENT_SECRET': 'source-secret',
            'LOOKER_TARGET_URL': 'https://target.looker.com',
            'LOOKER_TARGET_CLIENT_ID': 'target-id',
            'LOOKER_TARGET_CLIENT_SECRET': 'target-secret',
            'GITHUB_TOKEN': '',
        }
        for key, value in env_vars.items():
            monkeypatch.setenv(key, value)
        monkeypatch.setattr(
            'lookml_transfer.config.config.load_dotenv', lambda: None
        )

        with pytest.raises(ValueError):
            Config.from_env()

    def test_config_from_env_missing_value(self, monkeypatch):
        """Test a missing option aborts before any network call."""
        for key in [
            'LOOKER_SOURCE_URL',
            'LOOKER_SOURCE_CLIENT_ID',
            'LOOKER_SOURCE_CLIENT_SECRET',
            'LOOKER_TARGET_URL',
            'LOOKER_TARGET_CLIENT_ID',
            'LOOKER_TARGET_CLIENT_SECRET',
            'GITHUB_TOKEN',
        ]:
            monkeypatch.delenv(key, raising=False)
        monkeypatch.setenv('LOOKER_SOURCE_URL', 'https://source.looker.com')
        monkeypatch.setattr(
            'lookml_transfer.config.config.load_dotenv', lambda: None
        )

        with pytest.raises(ValueError):
            Config.from_env()

    def test_missing_config_file(self):
        """Test handling of missing configuration file."""
        with pytest.raises(FileNotFoundError):
            Config.from_file('/nonexistent/config.yaml')

    def test_create_template_loads_back(self, tmp_path):
        """Test the generated template is a valid configuration."""
        path = tmp_path / 'nested' / 'config.yaml'

        Config.create_template(str(path))

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        assert set(data) == {'source', 'target', 'github', 'transfer', 'logging'}

        config = Config.from_file(str(path))
        assert config.transfer.retry_delays == [20, 60, 120]
        assert '{extra[component]}' in config.logging.format

    def test_logging_format_defaults_to_component_format(self):
        """Test no format is forced over the component-aware default."""
        config = Config(
            source=_instance(),
            target=_instance(url='https://target.looker.com'),
            github=GitHubConfig(token='gh-token'),
        )

        assert config.logging.format is None
