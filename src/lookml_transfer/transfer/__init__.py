"""Transfer workflow, batch runner and validation."""

from .retry import RetryPolicy, WriteMode
from .status import StatusReporter, StatusSink
from .workflow import TransferOutcome, TransferStatus, TransferWorkflow
from .orchestrator import BatchRunner, BatchSummary, branch_name_for
from .engine import TransferEngine
from .validation import ProjectValidator, ValidationResult

__all__ = [
    'RetryPolicy',
    'WriteMode',
    'StatusReporter',
    'StatusSink',
    'TransferOutcome',
    'TransferStatus',
    'TransferWorkflow',
    'BatchRunner',
    'BatchSummary',
    'branch_name_for',
    'TransferEngine',
    'ProjectValidator',
    'ValidationResult',
]
