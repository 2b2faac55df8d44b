"""
Payment notification sequencer.

Turns one Tokopay status callback into WhatsApp messages for the user
who created the order:

    RECEIVED -> AUTHENTICATED -> CORRELATED -> DISPATCHING -> DONE
                     |                |
                     +--> REJECTED <--+

SUCCESS sends a confirmation immediately, then a processing update and a
completion notice from a background task. FAILED and PENDING send one
message before returning. Anything else is logged and ignored.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from transport.fonnte.sender import DeliveryError, FonnteSender
from transport.tokopay.reference import decode_reference
from transport.tokopay.schemas import PaymentCallback
from transport.tokopay.security import SignatureCodec

from . import templates
from .dedup import ProcessedReferenceStore
from .scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)


class DispatchState(str, Enum):
    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    CORRELATED = "correlated"
    DISPATCHING = "dispatching"
    DONE = "done"
    REJECTED = "rejected"


class RejectReason(str, Enum):
    BAD_SIGNATURE = "bad-signature"
    UNRESOLVABLE_REFERENCE = "unresolvable-reference"


class PaymentStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    PENDING = "PENDING"


@dataclass
class NotificationOutcome:
    """Where a callback ended up, and what was sent synchronously."""

    state: DispatchState
    reason: Optional[RejectReason] = None
    recipient: Optional[str] = None
    messages_delivered: int = 0
    follow_up_scheduled: bool = False
    duplicate: bool = False

    @property
    def authenticated(self) -> bool:
        return self.reason is not RejectReason.BAD_SIGNATURE


class NotificationSequencer:
    """Authenticate, correlate and dispatch payment-status notifications."""

    def __init__(
        self,
        codec: SignatureCodec,
        sender: FonnteSender,
        scheduler: Optional[Scheduler] = None,
        first_delay: float = 3.0,
        second_delay: float = 5.0,
        dedup: Optional[ProcessedReferenceStore] = None,
    ):
        self.codec = codec
        self.sender = sender
        self.scheduler = scheduler or AsyncioScheduler()
        self.first_delay = first_delay
        self.second_delay = second_delay
        self.dedup = dedup

    async def process(self, callback: PaymentCallback) -> NotificationOutcome:
        """
        Run one callback through the state machine.

        Never raises for delivery problems; those are logged per stage.
        """
        log_context = {"reference_id": callback.reference_id, "status": callback.status}

        # RECEIVED -> AUTHENTICATED
        if not self.codec.verify(callback):
            logger.warning("Invalid Tokopay webhook signature", extra=log_context)
            return NotificationOutcome(
                state=DispatchState.REJECTED, reason=RejectReason.BAD_SIGNATURE
            )

        # AUTHENTICATED -> CORRELATED
        recipient = decode_reference(callback.reference_id)
        if recipient is None:
            logger.error(
                f"Cannot extract recipient from reference_id: {callback.reference_id}",
                extra=log_context,
            )
            return NotificationOutcome(
                state=DispatchState.REJECTED, reason=RejectReason.UNRESOLVABLE_REFERENCE
            )

        try:
            status = PaymentStatus(callback.status)
        except ValueError:
            logger.warning(f"Ignoring unknown payment status {callback.status!r}", extra=log_context)
            return NotificationOutcome(state=DispatchState.DONE, recipient=recipient)

        if self.dedup is not None and not self.dedup.check_and_add(callback.reference_id, status.value):
            logger.info("Duplicate payment callback, already notified", extra=log_context)
            return NotificationOutcome(state=DispatchState.DONE, recipient=recipient, duplicate=True)

        # CORRELATED -> DISPATCHING
        outcome = NotificationOutcome(state=DispatchState.DISPATCHING, recipient=recipient)

        if status is PaymentStatus.SUCCESS:
            logger.info(f"Payment successful for: {recipient}", extra=log_context)
            if await self._send(recipient, templates.payment_success(callback), "confirmation"):
                outcome.messages_delivered += 1
            self.scheduler.schedule(
                self._follow_up(recipient, callback.reference_id),
                name=f"payment-follow-up-{callback.reference_id}",
            )
            outcome.follow_up_scheduled = True

        elif status is PaymentStatus.FAILED:
            logger.info(f"Payment failed for: {recipient}", extra=log_context)
            if await self._send(recipient, templates.payment_failed(callback), "failed"):
                outcome.messages_delivered += 1

        else:
            logger.info(f"Payment pending for: {recipient}", extra=log_context)
            if await self._send(recipient, templates.payment_pending(callback), "pending"):
                outcome.messages_delivered += 1

        outcome.state = DispatchState.DONE
        return outcome

    async def _follow_up(self, recipient: str, reference_id: str) -> None:
        """Processing update after first_delay, completion after second_delay more."""
        await self.scheduler.sleep(self.first_delay)
        await self._send(recipient, templates.order_processing(), "processing", reference_id)

        await self.scheduler.sleep(self.second_delay)
        await self._send(recipient, templates.order_completed(), "completed", reference_id)

    async def _send(
        self,
        recipient: str,
        body: str,
        stage: str,
        reference_id: Optional[str] = None,
    ) -> bool:
        try:
            result = await self.sender.send_text(recipient, body)
        except DeliveryError as e:
            logger.error(
                f"Failed to send {stage} notification to {recipient}: {e}",
                extra={"stage": stage, "reference_id": reference_id},
            )
            return False

        if not result.delivered:
            logger.warning(
                f"Fonnte refused {stage} notification to {recipient}: {result.reason}",
                extra={"stage": stage, "reference_id": reference_id},
            )
        return result.delivered
