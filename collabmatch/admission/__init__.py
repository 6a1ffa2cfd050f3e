"""Request admission control.

Public API:
    - RequestQueueManager: Per-queue priority admission with bounded concurrency
    - AdmissionController: Queue routing with a bypass list
    - Priority: CRITICAL, HIGH, NORMAL, LOW, BACKGROUND
    - AdmissionConfig: Configuration settings
"""

from collabmatch.admission.config import (
    AdmissionConfig,
    get_admission_config,
    reset_admission_config,
)
from collabmatch.admission.queue import (
    AdmissionController,
    Priority,
    QueueStats,
    RequestQueueManager,
)

__all__ = [
    "AdmissionController",
    "RequestQueueManager",
    "Priority",
    "QueueStats",
    "AdmissionConfig",
    "get_admission_config",
    "reset_admission_config",
]
