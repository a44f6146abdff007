from .fulfillment_service import (
    CheckoutFulfillmentService,
    FulfillmentOutcome,
    FulfillmentResult,
)

__all__ = ["CheckoutFulfillmentService", "FulfillmentOutcome", "FulfillmentResult"]
