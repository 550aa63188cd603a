"""Transfer engine - main entry point for batch transfers."""

from typing import Callable, Optional
from urllib.parse import urlparse

from loguru import logger

from ..api.auth import authenticate
from ..api.client import ApiGateway, GitHubClient, LookerClient
from ..config.config import Config
from ..sheet.table import TransferSheet
from .orchestrator import BatchRunner, BatchSummary
from .retry import RetryPolicy
from .workflow import TransferWorkflow


class TransferEngine:
    """Authenticates once per instance and runs the batch over a sheet."""

    def __init__(self, config: Config, sleep: Optional[Callable[[float], None]] = None):
        """Initialize transfer engine.

        Args:
            config: Transfer configuration
            sleep: Blocking sleep used between branch attempts
        """
        self.config = config
        self.sleep = sleep
        self.logger = logger.bind(component='TransferEngine')

        self.source_gateway = ApiGateway(timeout=config.source.timeout)
        self.target_gateway = ApiGateway(timeout=config.target.timeout)
        self.github_gateway = ApiGateway(timeout=config.github.timeout)

    def build_workflow(self) -> TransferWorkflow:
        """Authenticate against both instances and wire the workflow.

        Raises:
            AuthError: If either login fails
        """
        source_token = authenticate(self.config.source, self.source_gateway.session)
        target_token = authenticate(self.config.target, self.target_gateway.session)

        settings = self.config.transfer
        policy_kwargs = {'sleep': self.sleep} if self.sleep else {}
        retry_policy = RetryPolicy(
            max_attempts=settings.max_attempts,
            delays=settings.retry_delays,
            **policy_kwargs,
        )

        return TransferWorkflow(
            source=LookerClient(
                self.source_gateway, self.config.source.api_url, source_token
            ),
            target=LookerClient(
                self.target_gateway, self.config.target.api_url, target_token
            ),
            github=GitHubClient(self.github_gateway, self.config.github),
            target_host=urlparse(self.config.target.url).hostname or '',
            retry_policy=retry_policy,
            dev_workspace=settings.dev_workspace,
        )

    def run(self, sheet: TransferSheet) -> BatchSummary:
        """Transfer every eligible row of the sheet.

        Args:
            sheet: Transfer sheet holding the input rows

        Returns:
            Batch summary
        """
        self.logger.info('Starting LookML project transfer')

        try:
            workflow = self.build_workflow()
            runner = BatchRunner(
                workflow, sheet, branch_prefix=self.config.transfer.branch_prefix
            )
            return runner.run_batch()
        except Exception as e:
            self.logger.error(f'Transfer batch aborted: {e}')
            raise
        finally:
            self.close()

    def close(self) -> None:
        for gateway in (self.source_gateway, self.target_gateway, self.github_gateway):
            gateway.close()
