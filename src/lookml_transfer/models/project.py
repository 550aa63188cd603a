"""Project entity models."""

import re
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, validator

from ..api.exceptions import ParseError

GITHUB_REMOTE_PATTERNS = [
    re.compile(r'^git@github\.com:(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$'),
    re.compile(
        r'^https://github\.com/(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$'
    ),
]


class ProjectDescriptor(BaseModel):
    """A project to transfer, as listed in one sheet row."""

    project_id: str = Field(..., description='LookML project id')
    base_branch: str = Field(default='master', description='Branch to start from')

    @validator('project_id')
    def validate_project_id(cls, v):
        """Validate project id is not blank."""
        v = v.strip()
        if not v:
            raise ValueError('project_id must not be empty')
        return v

    @validator('base_branch')
    def validate_base_branch(cls, v):
        return v.strip() or 'master'


class RemoteRepository(BaseModel):
    """Git remote of a source project, with its GitHub coordinates."""

    remote_url: str = Field(..., description='Git remote URL')
    service_name: Optional[str] = Field(default=None, description='Git service name')
    owner: str = Field(..., description='GitHub repository owner')
    repo: str = Field(..., description='GitHub repository name')

    @classmethod
    def parse(
        cls, remote_url: Optional[str], service_name: Optional[str] = None
    ) -> 'RemoteRepository':
        """Build a reference from an SSH or HTTPS GitHub remote URL.

        Raises:
            ParseError: If the URL is not a GitHub remote
        """
        url = (remote_url or '').strip()
        for pattern in GITHUB_REMOTE_PATTERNS:
            match = pattern.match(url)
            if match:
                return cls(
                    remote_url=url,
                    service_name=service_name,
                    owner=match.group('owner'),
                    repo=match.group('repo'),
                )
        raise ParseError(f'Cannot parse GitHub owner/repo from remote URL: {url!r}')


class LookerProject(BaseModel):
    """Looker project as returned by the projects endpoint."""

    id: str = Field(..., description='Project id')
    name: Optional[str] = Field(default=None, description='Project name')
    git_remote_url: Optional[str] = Field(default=None, description='Git remote URL')
    git_service_name: Optional[str] = Field(
        default=None, description='Git service name'
    )

    class Config:
        """Pydantic configuration."""

        extra = 'ignore'

    def remote_repository(self) -> RemoteRepository:
        """Parse this project's remote into a GitHub reference."""
        return RemoteRepository.parse(self.git_remote_url, self.git_service_name)


class ProjectUpdate(BaseModel):
    """Fields written to the target project to bind it to its remote."""

    git_remote_url: str = Field(..., description='Git remote URL')
    git_service_name: Optional[str] = Field(
        default=None, description='Git service name'
    )
    deploy_key: str = Field(..., description='Deploy key generated by the target')


class GitBranchRequest(BaseModel):
    """Body of a git branch create or update call."""

    name: str = Field(..., description='Branch name')
    ref: str = Field(..., description='Ref the branch is set to')

    @classmethod
    def from_base(cls, name: str, base_branch: str) -> 'GitBranchRequest':
        return cls(name=name, ref=f'origin/{base_branch}')


class ConnectionTestStatus(str, Enum):
    """Outcome of a single git connection test."""

    PASS = 'pass'
    FAIL = 'fail'

    @classmethod
    def from_api(cls, status: Optional[str]) -> 'ConnectionTestStatus':
        """Map the free-text status reported by Looker."""
        if status and status.strip().lower().startswith('pass'):
            return cls.PASS
        return cls.FAIL


class ConnectionTestResult(BaseModel):
    """Result of running one git connection test."""

    id: str = Field(..., description='Test id')
    status: ConnectionTestStatus = Field(..., description='Normalized status')
    message: Optional[str] = Field(default=None, description='Message from Looker')

    @property
    def passed(self) -> bool:
        return self.status == ConnectionTestStatus.PASS


class LookMLModel(BaseModel):
    """LookML model definition."""

    name: str = Field(..., description='Model name')
    project_name: Optional[str] = Field(default=None, description='Owning project')

    class Config:
        """Pydantic configuration."""

        extra = 'ignore'

    def target_payload(self) -> Dict[str, Any]:
        """Body used to recreate this model on the target instance."""
        return {
            'name': self.name,
            'project_name': self.project_name,
            'allow_all_db_connections': True,
        }
