"""Checkout routes: start a Stripe checkout and confirm a completed payment."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import EmailStr, Field

from src.greenhouse.api.http.deps import (
    ensure_caller_is,
    get_current_identity,
    get_fulfillment_service,
    get_payment_gateway,
)
from src.greenhouse.core.models import IdentityClaims
from src.greenhouse.core.services import (
    CheckoutFulfillmentService,
    CheckoutLineItem,
    CheckoutMetadata,
    FulfillmentOutcome,
    FulfillmentResult,
    PaymentGateway,
)
from src.greenhouse.entities.core._base import CamelModel
from src.greenhouse.runtime.context import get_config

router = APIRouter(tags=["payments"])

# status code and error code for outcomes that are not a success
_OUTCOME_ERRORS: dict[FulfillmentOutcome, tuple[int, str]] = {
    FulfillmentOutcome.PRODUCT_NOT_FOUND: (404, "not_found"),
    FulfillmentOutcome.OUT_OF_STOCK: (409, "out_of_stock"),
    FulfillmentOutcome.PAYMENT_NOT_COMPLETED: (402, "payment_not_completed"),
}


class CheckoutCustomer(CamelModel):
    email: EmailStr
    name: str | None = None
    image: str | None = None


class CheckoutRequest(CamelModel):
    plant_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    category: str = ""
    image: str | None = None
    price: Decimal = Field(gt=0, decimal_places=2)
    quantity: int = Field(default=1, gt=0)
    customer: CheckoutCustomer


class CheckoutResponse(CamelModel):
    url: str


class PaymentConfirmation(CamelModel):
    session_id: str = Field(min_length=1)


def _checkout_urls(plant_id: str) -> tuple[str, str]:
    client_domain = get_config().app.client_domain.rstrip("/")
    success_url = f"{client_domain}/payment-success?session_id={{CHECKOUT_SESSION_ID}}"
    cancel_url = f"{client_domain}/plant/{plant_id}"
    return success_url, cancel_url


@router.post("/create/checkout-session", response_model=CheckoutResponse)
async def create_checkout_session(
    payment_info: CheckoutRequest,
    identity: IdentityClaims = Depends(get_current_identity),
    payment_gateway: PaymentGateway = Depends(get_payment_gateway),
) -> CheckoutResponse:
    """Create a hosted checkout page for one plant and return its URL."""
    buyer_email = str(payment_info.customer.email)
    ensure_caller_is(buyer_email, identity)

    success_url, cancel_url = _checkout_urls(payment_info.plant_id)
    # price and quantity come from the storefront request, not the catalog;
    # fulfillment records the amount actually charged
    url = await run_in_threadpool(
        payment_gateway.create_checkout_session,
        CheckoutLineItem(
            name=payment_info.name,
            description=payment_info.description,
            image=payment_info.image,
            unit_price=payment_info.price,
            quantity=payment_info.quantity,
        ),
        buyer_email,
        CheckoutMetadata(product_id=payment_info.plant_id, buyer_email=buyer_email),
        success_url,
        cancel_url,
    )
    return CheckoutResponse(url=url)


@router.post("/payment-success", response_model=FulfillmentResult)
async def confirm_payment(
    confirmation: PaymentConfirmation,
    request: Request,
    fulfillment_service: CheckoutFulfillmentService = Depends(get_fulfillment_service),
):
    """Record the order for a paid checkout session, at most once."""
    result = await run_in_threadpool(fulfillment_service.fulfill, confirmation.session_id)

    if result.outcome not in _OUTCOME_ERRORS:
        return result

    status_code, error_code = _OUTCOME_ERRORS[result.outcome]
    body = result.model_dump(mode="json", by_alias=True)
    body.update(
        {
            "error": error_code,
            "detail": result.message,
            "request_id": getattr(request.state, "request_id", None),
        }
    )
    return JSONResponse(status_code=status_code, content=body)
