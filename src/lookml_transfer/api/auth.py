"""Session login against a Looker instance."""

from typing import Optional

import requests
from loguru import logger

from ..config.config import InstanceConfig
from .exceptions import AuthError


def authenticate(
    config: InstanceConfig, session: Optional[requests.Session] = None
) -> str:
    """Exchange API3 credentials for a bearer token.

    Args:
        config: Instance URL and credentials
        session: Optional requests session to reuse

    Returns:
        Access token for the instance

    Raises:
        AuthError: If the exchange does not yield an access token
    """
    http = session or requests
    url = f'{config.api_url}/login'
    logger.info(f'Authenticating against {config.url}')

    try:
        response = http.post(
            url,
            data={
                'client_id': config.client_id,
                'client_secret': config.client_secret.get_secret_value(),
            },
            timeout=config.timeout,
        )
    except requests.RequestException as e:
        raise AuthError(f'Network error logging in to {config.url}: {e}', config.url)

    if not 200 <= response.status_code < 300:
        raise AuthError(
            f'Login to {config.url} failed with HTTP {response.status_code}',
            config.url,
        )

    try:
        token = response.json().get('access_token')
    except (ValueError, AttributeError):
        token = None

    if not token:
        raise AuthError(f'Login to {config.url} returned no access token', config.url)

    return token
