"""
Payment orchestration.

Chat replies and payment intents (inbound chat), plus the status
notification sequence (inbound Tokopay callbacks).
"""

from .dedup import ProcessedReferenceStore
from .intent import PaymentIntentHandler
from .replies import ChatResponder, Intent, classify_intent
from .scheduler import AsyncioScheduler, Scheduler
from .sequencer import (
    DispatchState,
    NotificationOutcome,
    NotificationSequencer,
    PaymentStatus,
    RejectReason,
)

__all__ = [
    "ChatResponder",
    "Intent",
    "classify_intent",
    "PaymentIntentHandler",
    "NotificationSequencer",
    "NotificationOutcome",
    "DispatchState",
    "RejectReason",
    "PaymentStatus",
    "Scheduler",
    "AsyncioScheduler",
    "ProcessedReferenceStore",
]
