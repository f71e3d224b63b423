"""Mock payment gateway used to settle fee payments."""

import logging
import random
import time
from decimal import Decimal

from edushield.core.config import settings
from edushield.schemas.common import BaseSchema

logger = logging.getLogger(__name__)


class GatewayResult(BaseSchema):
    """Outcome reported by the gateway for one charge."""

    success: bool
    transaction_id: str | None = None
    error_message: str | None = None
    metadata: dict = {}


class MockPaymentGateway:
    """Simulated gateway that fails a configurable fraction of payments."""

    def __init__(self, failure_rate: float | None = None, rng: random.Random | None = None):
        self.failure_rate = settings.PAYMENT_FAILURE_RATE if failure_rate is None else failure_rate
        self._rng = rng or random.Random()

    def process_payment(
        self,
        amount: Decimal,
        currency: str,
        description: str,
        metadata: dict | None = None,
    ) -> GatewayResult:
        if self._rng.random() < self.failure_rate:
            logger.warning(f"Mock payment of {amount} {currency} declined: {description}")
            return GatewayResult(
                success=False,
                error_message="Payment was declined by the gateway",
                metadata=metadata or {},
            )

        transaction_id = f"mock_{int(time.time() * 1000)}_{self._rng.randint(1000, 9999)}"
        logger.info(f"Mock payment of {amount} {currency} processed: {transaction_id}")
        return GatewayResult(
            success=True,
            transaction_id=transaction_id,
            metadata=metadata or {},
        )
