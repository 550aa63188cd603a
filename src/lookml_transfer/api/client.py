"""Remote API gateway and clients for Looker and GitHub."""

import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from loguru import logger
from pydantic import BaseModel

from ..config.config import GitHubConfig
from ..models.project import (
    ConnectionTestResult,
    ConnectionTestStatus,
    GitBranchRequest,
    LookerProject,
    LookMLModel,
    ProjectUpdate,
    RemoteRepository,
)
from .exceptions import ApiCallError

# Endpoints answering with a raw text body instead of JSON
RAW_TEXT_ENDPOINTS = [
    re.compile(r'/projects/[^/]+/git/deploy_key/?$'),
    re.compile(r'/projects/[^/]+/deploy_to_production/?$'),
]


class APIResponse(BaseModel):
    """Standard API response wrapper."""

    status_code: int
    data: Any


class ApiGateway:
    """Issues bearer-authenticated requests and normalizes their outcome."""

    def __init__(self, timeout: Optional[float] = 30, session=None):
        """Initialize API gateway.

        Args:
            timeout: Request timeout in seconds
            session: Optional requests session to reuse
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': 'lookml-transfer/0.1.0'})

    @staticmethod
    def is_raw_text_endpoint(url: str) -> bool:
        """Check whether the endpoint returns an opaque text body."""
        path = url.split('?', 1)[0]
        return any(pattern.search(path) for pattern in RAW_TEXT_ENDPOINTS)

    def call(
        self,
        method: str,
        url: str,
        token: str,
        payload: Optional[Any] = None,
    ) -> APIResponse:
        """Make an authenticated API request.

        Args:
            method: HTTP method
            url: Absolute endpoint URL
            token: Bearer token
            payload: JSON request body

        Returns:
            API response

        Raises:
            ApiCallError: For non-2xx responses and network errors
        """
        headers = {'Authorization': f'Bearer {token}'}
        kwargs: Dict[str, Any] = {'headers': headers, 'timeout': self.timeout}
        if payload is not None:
            kwargs['json'] = payload

        logger.debug(f'{method} {url}')
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f'Network error during {method} {url}: {e}')
            raise ApiCallError(f'Network error: {e}')

        return self._handle_response(method, url, response)

    def _handle_response(
        self, method: str, url: str, response: requests.Response
    ) -> APIResponse:
        """Classify a response and decode its body."""
        if not 200 <= response.status_code < 300:
            raise ApiCallError(
                f'{method} {url} failed with HTTP {response.status_code}: '
                f'{response.text}',
                status_code=response.status_code,
                body=response.text,
            )

        if self.is_raw_text_endpoint(url):
            data = response.text
        else:
            try:
                data = response.json() if response.content else None
            except ValueError:
                raise ApiCallError(
                    f'{method} {url} returned a body that is not JSON',
                    status_code=response.status_code,
                    body=response.text,
                )

        return APIResponse(status_code=response.status_code, data=data)

    def close(self):
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


class LookerClient:
    """Looker REST API client bound to one instance and one session token."""

    def __init__(self, gateway: ApiGateway, api_url: str, token: str):
        """Initialize Looker client.

        Args:
            gateway: Gateway used for every request
            api_url: Versioned API base URL, e.g. https://host/api/4.0
            token: Bearer token for this instance
        """
        self.gateway = gateway
        self.api_url = api_url.rstrip('/')
        self.token = token

    def _url(self, endpoint: str) -> str:
        return f'{self.api_url}/{endpoint.lstrip("/")}'

    def _call(self, method: str, endpoint: str, payload: Optional[Any] = None) -> Any:
        return self.gateway.call(method, self._url(endpoint), self.token, payload).data

    @staticmethod
    def _project_path(project_id: str) -> str:
        return f'projects/{quote(project_id, safe="")}'

    def get_project(self, project_id: str) -> LookerProject:
        return LookerProject(**self._call('GET', self._project_path(project_id)))

    def update_session_workspace(self, workspace_id: str = 'dev') -> Any:
        return self._call('PATCH', 'session', {'workspace_id': workspace_id})

    def create_project(self, name: str) -> LookerProject:
        return LookerProject(**self._call('POST', 'projects', {'name': name}))

    def create_deploy_key(self, project_id: str) -> str:
        """Generate an SSH deploy key and return the public key text."""
        return self._call('POST', f'{self._project_path(project_id)}/git/deploy_key')

    def update_project(self, project_id: str, update: ProjectUpdate) -> Any:
        return self._call(
            'PATCH', self._project_path(project_id), update.dict(exclude_none=True)
        )

    def write_git_branch(
        self, project_id: str, branch: GitBranchRequest, method: str
    ) -> Any:
        """Create (POST) or update (PUT) the project's git branch."""
        return self._call(
            method, f'{self._project_path(project_id)}/git_branch', branch.dict()
        )

    def git_connection_tests(self, project_id: str) -> List[Dict[str, Any]]:
        return self._call(
            'GET', f'{self._project_path(project_id)}/git_connection_tests'
        ) or []

    def run_git_connection_test(
        self, project_id: str, test_id: str
    ) -> ConnectionTestResult:
        data = self._call(
            'GET',
            f'{self._project_path(project_id)}/git_connection_tests/'
            f'{quote(test_id, safe="")}',
        ) or {}
        return ConnectionTestResult(
            id=test_id,
            status=ConnectionTestStatus.from_api(data.get('status')),
            message=data.get('message'),
        )

    def deploy_to_production(self, project_id: str) -> str:
        return self._call(
            'POST', f'{self._project_path(project_id)}/deploy_to_production'
        )

    def lookml_models(self) -> List[LookMLModel]:
        return [LookMLModel(**item) for item in self._call('GET', 'lookml_models') or []]

    def create_lookml_model(self, model: LookMLModel) -> Any:
        return self._call('POST', 'lookml_models', model.target_payload())

    def validate_project(self, project_id: str) -> Dict[str, Any]:
        return self._call('POST', f'{self._project_path(project_id)}/validate') or {}


class GitHubClient:
    """GitHub REST API client for repository deploy keys."""

    def __init__(self, gateway: ApiGateway, config: GitHubConfig):
        """Initialize GitHub client.

        Args:
            gateway: Gateway used for every request
            config: GitHub host configuration
        """
        self.gateway = gateway
        self.config = config

    def add_deploy_key(
        self,
        repository: RemoteRepository,
        title: str,
        key: str,
        read_only: bool = False,
    ) -> Any:
        """Register a deploy key on a repository."""
        url = f'{self.config.api_url}/repos/{repository.owner}/{repository.repo}/keys'
        payload = {'title': title, 'key': key, 'read_only': read_only}
        return self.gateway.call(
            'POST', url, self.config.token.get_secret_value(), payload
        ).data
