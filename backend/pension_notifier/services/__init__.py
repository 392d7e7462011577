"""Services for policy evaluation, matching, dispatch and scheduling."""
from .scheduler import SchedulerService, RunSummary
from .dispatcher import DispatcherService
from .push_sender import PushSenderService

__all__ = ["SchedulerService", "RunSummary", "DispatcherService", "PushSenderService"]
