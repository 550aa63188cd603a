"""Batch runner for transferring the projects listed in a sheet."""

import re
from datetime import datetime
from typing import Iterable, List, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from ..models.project import ProjectDescriptor
from ..sheet.table import Column, SheetRow, TransferSheet
from .status import StatusReporter
from .workflow import TransferOutcome, TransferStatus, TransferWorkflow

GIT_CONNECTION_PASSED = 'Passed. Please add the deploy key to your Git provider.'
GIT_CONNECTION_FAILED = 'Failed.'
READY_TO_VALIDATE = 'Ready to Validate'
NOT_APPLICABLE = 'N/A'


def branch_name_for(project_id: str, prefix: str) -> str:
    """Lower-case the id and replace every non-alphanumeric character."""
    return prefix + re.sub(r'[^a-z0-9]', '_', project_id.lower())


class BatchSummary(BaseModel):
    """Summary of a batch run."""

    total_rows: int = Field(default=0, description='Rows in the sheet')
    successful: int = Field(default=0, description='Rows transferred')
    failed: int = Field(default=0, description='Rows that failed')
    skipped: int = Field(default=0, description='Rows already transferred')
    invalid: int = Field(default=0, description='Rows without a project id')

    started_at: datetime = Field(..., description='Batch start time')
    completed_at: Optional[datetime] = Field(
        default=None, description='Batch completion time'
    )

    outcomes: List[TransferOutcome] = Field(
        default_factory=list, description='Outcomes of the rows that ran'
    )


class BatchRunner:
    """Runs the transfer workflow for each eligible sheet row, in order."""

    def __init__(
        self,
        workflow: TransferWorkflow,
        sheet: TransferSheet,
        branch_prefix: str = 'lookml_transfer_',
    ):
        self.workflow = workflow
        self.sheet = sheet
        self.branch_prefix = branch_prefix
        self.logger = logger.bind(component='BatchRunner')

    def run_batch(self, rows: Optional[Iterable[SheetRow]] = None) -> BatchSummary:
        """Transfer every row not yet marked successful.

        A failing row never stops the batch.

        Args:
            rows: Rows to process (defaults to every sheet row)

        Returns:
            Batch summary
        """
        rows = list(self.sheet.rows() if rows is None else rows)
        summary = BatchSummary(total_rows=len(rows), started_at=datetime.now())

        self.logger.info(f'Processing {len(rows)} rows')

        for row in rows:
            if TransferStatus.from_cell(row.transfer_results) == TransferStatus.SUCCESS:
                self.logger.info(f'Skipping {row.project}: already transferred')
                summary.skipped += 1
                continue

            try:
                descriptor = ProjectDescriptor(
                    project_id=row.project, base_branch=row.base_branch
                )
            except ValidationError:
                self.logger.warning(f'Row {row.key} has no project id, skipping')
                summary.invalid += 1
                continue

            outcome = self._transfer_row(row, descriptor)
            summary.outcomes.append(outcome)
            if outcome.success:
                summary.successful += 1
            else:
                summary.failed += 1

        summary.completed_at = datetime.now()
        self.logger.info(
            f'Batch completed: {summary.successful} successful, '
            f'{summary.failed} failed, {summary.skipped} skipped'
        )
        return summary

    def _transfer_row(
        self, row: SheetRow, descriptor: ProjectDescriptor
    ) -> TransferOutcome:
        branch_name = branch_name_for(descriptor.project_id, self.branch_prefix)
        reporter = StatusReporter(self.sheet, row.key, descriptor.project_id)

        outcome = self.workflow.run(descriptor, branch_name, reporter)
        try:
            self.record_outcome(row.key, outcome)
        except Exception as e:
            self.logger.error(
                f'Could not record outcome of {descriptor.project_id} '
                f'in row {row.key}: {e}'
            )
        return outcome

    def record_outcome(self, row_key: int, outcome: TransferOutcome) -> None:
        """Write the terminal outcome and its derived fields."""
        if outcome.success:
            git_connection, validation = GIT_CONNECTION_PASSED, READY_TO_VALIDATE
        else:
            git_connection, validation = GIT_CONNECTION_FAILED, NOT_APPLICABLE

        for column, value in (
            (Column.TRANSFER, outcome.message),
            (Column.GIT_CONNECTION, git_connection),
            (Column.VALIDATE, validation),
        ):
            self.sheet.write(row_key, column, value)
            self.sheet.flush()
