"""Review services.

1. Staging writer validates accepted items and inserts them into the queues
2. Approval service promotes queue records into production tables
"""

from intake.services.review.approval import (
    ApprovalAction,
    ApprovalResponse,
    ApprovalService,
    BulkApprovalResult,
    ReconcileResult,
)
from intake.services.review.staging import StagingResult, StagingWriter
from intake.services.review.transforms import production_values, queue_values

__all__ = [
    "ApprovalAction",
    "ApprovalResponse",
    "ApprovalService",
    "BulkApprovalResult",
    "ReconcileResult",
    "StagingResult",
    "StagingWriter",
    "production_values",
    "queue_values",
]
