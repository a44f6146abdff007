"""Payment gateway contract."""

from abc import ABC, abstractmethod
from decimal import Decimal

from pydantic import BaseModel, Field

PAID = "paid"


class CheckoutLineItem(BaseModel):
    """The single product line sold through a checkout session."""

    name: str = Field(min_length=1)
    description: str = ""
    image: str | None = None
    unit_price: Decimal = Field(gt=0, decimal_places=2)
    quantity: int = Field(gt=0)


class CheckoutMetadata(BaseModel):
    """Identifiers stored on the session so fulfillment can find the plant."""

    product_id: str | None = None
    buyer_email: str | None = None


class CheckoutSessionInfo(BaseModel):
    """Payment state of a checkout session as reported by the provider."""

    session_id: str
    payment_status: str
    amount_total: int = Field(description="Charged amount in minor units")
    currency: str | None = None
    payment_intent_id: str | None = None
    customer_email: str | None = Field(
        default=None, description="Email the buyer entered on the hosted checkout page"
    )
    metadata: CheckoutMetadata = Field(default_factory=CheckoutMetadata)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAID


class PaymentGateway(ABC):
    @abstractmethod
    def create_checkout_session(
        self,
        item: CheckoutLineItem,
        buyer_email: str,
        metadata: CheckoutMetadata,
        success_url: str,
        cancel_url: str,
    ) -> str:
        """Create a hosted checkout session and return its URL.

        Raises:
            UpstreamServiceError: the provider rejected the request or could
                not be reached.
        """
        raise NotImplementedError

    @abstractmethod
    def retrieve_session(self, session_id: str) -> CheckoutSessionInfo:
        """Look up a checkout session.

        Raises:
            PaymentSessionNotFoundError: no session has this id.
            PaymentLookupError: any other provider failure.
        """
        raise NotImplementedError
