"""Nine-step transfer of one LookML project between Looker instances."""

from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, Field

from ..api.client import GitHubClient, LookerClient
from ..api.exceptions import TransferError, ValidationStepFailure, WorkflowError
from ..models.project import (
    GitBranchRequest,
    LookerProject,
    ProjectDescriptor,
    ProjectUpdate,
    RemoteRepository,
)
from .retry import RetryPolicy, WriteMode
from .status import StatusReporter


class TransferStatus(str, Enum):
    """Terminal outcome of a project transfer."""

    SUCCESS = 'success'
    FAILED = 'failed'

    @classmethod
    def from_cell(cls, text: Optional[str]) -> Optional['TransferStatus']:
        """Recover the recorded outcome from a Transfer Results cell."""
        value = (text or '').strip().lower()
        if value.startswith('success'):
            return cls.SUCCESS
        if value.startswith('failed'):
            return cls.FAILED
        return None


class TransferOutcome(BaseModel):
    """Result of one workflow run."""

    project_id: str = Field(..., description='Transferred project')
    status: TransferStatus = Field(..., description='Terminal status')
    message: str = Field(default='', description='Final status message')

    started_at: datetime = Field(..., description='Transfer start time')
    completed_at: Optional[datetime] = Field(
        default=None, description='Transfer completion time'
    )

    completed_steps: int = Field(default=0, description='Steps finished')
    failed_step: Optional[int] = Field(default=None, description='Step that failed')
    error_type: Optional[str] = Field(default=None, description='Error class name')
    models_configured: int = Field(default=0, description='LookML models created')
    deploy_key_registered: bool = Field(
        default=False, description='Deploy key was added on GitHub'
    )

    @property
    def success(self) -> bool:
        return self.status == TransferStatus.SUCCESS


class TransferContext(BaseModel):
    """Values carried from one step to the next."""

    descriptor: ProjectDescriptor
    branch_name: str
    source_project: Optional[LookerProject] = None
    repository: Optional[RemoteRepository] = None
    deploy_key: Optional[str] = None
    deploy_key_registered: bool = False
    models_configured: int = 0

    @property
    def project_id(self) -> str:
        return self.descriptor.project_id


Step = Callable[[TransferContext, StatusReporter], str]


class TransferWorkflow:
    """Runs the fixed transfer sequence for one project at a time."""

    def __init__(
        self,
        source: LookerClient,
        target: LookerClient,
        github: GitHubClient,
        target_host: str,
        retry_policy: Optional[RetryPolicy] = None,
        dev_workspace: str = 'dev',
    ):
        """Initialize transfer workflow.

        Args:
            source: Client for the source instance
            target: Client for the target instance
            github: Client for the GitHub host
            target_host: Host name of the target instance, used in key titles
            retry_policy: Policy applied to git branch creation
            dev_workspace: Workspace the target session switches to
        """
        self.source = source
        self.target = target
        self.github = github
        self.target_host = target_host
        self.retry_policy = retry_policy or RetryPolicy()
        self.dev_workspace = dev_workspace
        self.logger = logger.bind(component='TransferWorkflow')

        self.steps: List[Tuple[str, Step]] = [
            ('fetch source project', self._fetch_source_project),
            ('create target project', self._create_target_project),
            ('create deploy key', self._create_deploy_key),
            ('register deploy key', self._register_deploy_key),
            ('update target project', self._update_target_project),
            ('create git branch', self._create_git_branch),
            ('run git connection tests', self._run_connection_tests),
            ('deploy to production', self._deploy_to_production),
            ('configure LookML models', self._configure_models),
        ]

    def run(
        self,
        descriptor: ProjectDescriptor,
        branch_name: str,
        reporter: StatusReporter,
    ) -> TransferOutcome:
        """Transfer one project.

        Every step runs only if the previous one succeeded. Errors never
        escape; they are turned into a failed outcome whose message carries
        the error text.

        Args:
            descriptor: Project id and base branch
            branch_name: Branch created on the target project
            reporter: Receives a message after every step

        Returns:
            Terminal outcome
        """
        context = TransferContext(descriptor=descriptor, branch_name=branch_name)
        outcome = TransferOutcome(
            project_id=descriptor.project_id,
            status=TransferStatus.FAILED,
            started_at=datetime.now(),
        )
        total = len(self.steps)

        self.logger.info(f'Starting transfer of project {descriptor.project_id}')

        for number, (name, step) in enumerate(self.steps, start=1):
            try:
                message = step(context, reporter)
            except TransferError as e:
                error: TransferError = e
            except Exception as e:
                error = WorkflowError(f'Unexpected error: {e}')
            else:
                outcome.completed_steps = number
                self._report(reporter, f'Step {number}/{total}: {message}')
                continue

            outcome.failed_step = number
            outcome.error_type = type(error).__name__
            outcome.message = f'Failed at step {number}/{total} ({name}): {error}'
            outcome.deploy_key_registered = context.deploy_key_registered
            outcome.completed_at = datetime.now()
            self.logger.error(f'{descriptor.project_id}: {outcome.message}')
            self._report(reporter, outcome.message)
            return outcome

        outcome.status = TransferStatus.SUCCESS
        outcome.models_configured = context.models_configured
        outcome.deploy_key_registered = context.deploy_key_registered
        outcome.message = (
            f'Success: project transferred, '
            f'{context.models_configured} LookML model(s) configured.'
        )
        outcome.completed_at = datetime.now()
        self.logger.info(f'{descriptor.project_id}: {outcome.message}')
        return outcome

    def _report(self, reporter: StatusReporter, message: str) -> None:
        """Send a status message; a failing sink never ends the transfer."""
        try:
            reporter.report(message)
        except Exception as e:
            self.logger.warning(f'Could not record status "{message}": {e}')

    def key_title(self, project_id: str) -> str:
        """Deploy key title for a project on the target host."""
        return f'{project_id}_{self.target_host.replace(".", "_")}'

    def _fetch_source_project(
        self, context: TransferContext, reporter: StatusReporter
    ) -> str:
        context.source_project = self.source.get_project(context.project_id)
        # Only GitHub remotes can receive a deploy key
        context.repository = context.source_project.remote_repository()
        return f'Fetched source project {context.project_id}'

    def _create_target_project(
        self, context: TransferContext, reporter: StatusReporter
    ) -> str:
        self.target.update_session_workspace(self.dev_workspace)
        self.target.create_project(context.project_id)
        return f'Created project {context.project_id} on target'

    def _create_deploy_key(
        self, context: TransferContext, reporter: StatusReporter
    ) -> str:
        key = self.target.create_deploy_key(context.project_id)
        if not key or not key.strip():
            raise WorkflowError('Target returned an empty deploy key')
        context.deploy_key = key.strip()
        return 'Created SSH deploy key'

    def _register_deploy_key(
        self, context: TransferContext, reporter: StatusReporter
    ) -> str:
        repository = context.repository
        self.github.add_deploy_key(
            repository,
            title=self.key_title(context.project_id),
            key=context.deploy_key,
            read_only=False,
        )
        context.deploy_key_registered = True
        return f'Registered deploy key on {repository.owner}/{repository.repo}'

    def _update_target_project(
        self, context: TransferContext, reporter: StatusReporter
    ) -> str:
        update = ProjectUpdate(
            git_remote_url=context.repository.remote_url,
            git_service_name=context.repository.service_name,
            deploy_key=context.deploy_key,
        )
        self.target.update_project(context.project_id, update)
        return 'Linked target project to its git remote'

    def _create_git_branch(
        self, context: TransferContext, reporter: StatusReporter
    ) -> str:
        branch = GitBranchRequest.from_base(
            context.branch_name, context.descriptor.base_branch
        )

        def write_branch(attempt: int):
            mode = WriteMode.for_attempt(attempt)
            return self.target.write_git_branch(context.project_id, branch, mode.value)

        def announce_retry(attempt: int, error: Exception, delay: float):
            self._report(
                reporter,
                f'Git branch attempt {attempt} failed ({error}); '
                f'retrying in {delay:g}s'
            )

        self.retry_policy.run(write_branch, on_retry=announce_retry)
        return f'Created git branch {branch.name} from {branch.ref}'

    def _run_connection_tests(
        self, context: TransferContext, reporter: StatusReporter
    ) -> str:
        tests = self.target.git_connection_tests(context.project_id)
        for test in tests:
            test_id = str(test.get('id'))
            result = self.target.run_git_connection_test(context.project_id, test_id)
            if not result.passed:
                raise ValidationStepFailure(
                    f'Git connection test {test_id} failed: {result.message}',
                    test_id=test_id,
                )
        return f'{len(tests)} git connection test(s) passed'

    def _deploy_to_production(
        self, context: TransferContext, reporter: StatusReporter
    ) -> str:
        self.target.deploy_to_production(context.project_id)
        return 'Deployed to production'

    def _configure_models(
        self, context: TransferContext, reporter: StatusReporter
    ) -> str:
        models = [
            model
            for model in self.source.lookml_models()
            if model.project_name == context.project_id
        ]
        for model in models:
            self.target.create_lookml_model(model)
        context.models_configured = len(models)
        return f'Configured {len(models)} LookML model(s)'
