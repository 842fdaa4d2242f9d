"""Background workers: message processor, run coordinator and Celery tasks."""

from .coordinator import RunCoordinator, RunSummary
from .processor import MessageProcessor, ProcessResult

__all__ = ["MessageProcessor", "ProcessResult", "RunCoordinator", "RunSummary"]
