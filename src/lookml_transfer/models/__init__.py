"""Data models for Looker entities."""

from .project import (
    ConnectionTestResult,
    ConnectionTestStatus,
    GitBranchRequest,
    LookerProject,
    LookMLModel,
    ProjectDescriptor,
    ProjectUpdate,
    RemoteRepository,
)

__all__ = [
    'ConnectionTestResult',
    'ConnectionTestStatus',
    'GitBranchRequest',
    'LookerProject',
    'LookMLModel',
    'ProjectDescriptor',
    'ProjectUpdate',
    'RemoteRepository',
]
