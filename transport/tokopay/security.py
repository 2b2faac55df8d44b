"""
Tokopay Signature Verification

SECURITY BOUNDARY - HMAC-SHA256 over a fixed-order canonical string.
No retries. No side effects.
"""

import hashlib
import hmac

from .schemas import PaymentCallback

CANONICAL_DELIMITER = ":"


class SignatureCodec:
    """Sign and verify Tokopay payloads with the shared secret key."""

    def __init__(self, merchant_id: str, secret_key: str):
        self.merchant_id = merchant_id
        self._secret = secret_key.encode("utf-8")

    @staticmethod
    def canonical_string(callback: PaymentCallback) -> str:
        """merchant_id:reference_id:amount:status"""
        return CANONICAL_DELIMITER.join(
            [
                callback.merchant_id,
                callback.reference_id,
                str(callback.amount),
                callback.status,
            ]
        )

    def sign(self, canonical: str) -> str:
        """Hex HMAC-SHA256 of the canonical string."""
        return hmac.new(
            key=self._secret,
            msg=canonical.encode("utf-8"),
            digestmod=hashlib.sha256,
        ).hexdigest()

    def sign_request(self, *fields: str) -> str:
        """Signature for outbound requests: merchant_id:<fields...>."""
        return self.sign(CANONICAL_DELIMITER.join([self.merchant_id, *fields]))

    def verify(self, callback: PaymentCallback) -> bool:
        """
        Recompute the callback signature from its own fields.

        Returns False (never raises) on mismatch or missing signature.
        """
        if not callback.signature:
            return False

        expected = self.sign(self.canonical_string(callback))

        # Compare (constant-time to prevent timing attacks)
        return hmac.compare_digest(
            callback.signature.encode("utf-8"),
            expected.encode("utf-8"),
        )
