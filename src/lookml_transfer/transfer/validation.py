"""On-demand validation of a transferred project on the target instance."""

from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from ..api.auth import authenticate
from ..api.client import ApiGateway, LookerClient
from ..config.config import InstanceConfig
from ..sheet.table import Column, TransferSheet


class ValidationResult(BaseModel):
    """Outcome of a project validation."""

    project_id: str = Field(..., description='Validated project')
    succeeded: bool = Field(..., description='No validation errors were reported')
    errors: List[str] = Field(default_factory=list, description='Error messages')

    @property
    def summary(self) -> str:
        if self.succeeded:
            return 'Validation succeeded.'
        return 'Validation failed: ' + '; '.join(self.errors)


class ProjectValidator:
    """Runs the target instance's LookML validator for one project."""

    def __init__(self, target: InstanceConfig, gateway: Optional[ApiGateway] = None):
        self.target = target
        self.gateway = gateway or ApiGateway(timeout=target.timeout)
        self.logger = logger.bind(component='ProjectValidator')

    def validate(self, project_id: str) -> ValidationResult:
        """Validate a project with a freshly acquired target token.

        Raises:
            AuthError: If the login fails
            ApiCallError: If the validate call fails
        """
        token = authenticate(self.target, self.gateway.session)
        client = LookerClient(self.gateway, self.target.api_url, token)

        response = client.validate_project(project_id)
        errors = [
            self._error_message(error) for error in response.get('errors') or []
        ]

        result = ValidationResult(
            project_id=project_id, succeeded=not errors, errors=errors
        )
        self.logger.info(f'{project_id}: {result.summary}')
        return result

    @staticmethod
    def _error_message(error) -> str:
        if isinstance(error, dict):
            message = error.get('message') or str(error)
            location = error.get('file_path')
            if location:
                line = error.get('line_number')
                location = f'{location}:{line}' if line else location
                return f'{message} ({location})'
            return message
        return str(error)

    def record(self, sheet: TransferSheet, result: ValidationResult) -> bool:
        """Write the result into the project's Validation Results cell.

        Returns:
            False if the sheet has no row for the project
        """
        row = sheet.find_row(result.project_id)
        if row is None:
            self.logger.warning(f'No sheet row for project {result.project_id}')
            return False
        sheet.write(row.key, Column.VALIDATION, result.summary)
        sheet.flush()
        return True

    def close(self):
        self.gateway.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
