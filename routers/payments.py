from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database

from database import get_db
from schemas import CheckoutSessionResponse, PaymentInfo, PaymentSuccess, PaymentSuccessResponse
from services.checkout import StripeCheckout
from services.orders_service import record_order

router = APIRouter(tags=["Payments"])


def get_checkout(request: Request) -> StripeCheckout:
    return request.app.state.checkout


@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    payment_info: PaymentInfo,
    checkout: StripeCheckout = Depends(get_checkout),
):
    url = await checkout.create_session(payment_info)
    return {"url": url}


@router.post("/payment-success", response_model=PaymentSuccessResponse)
async def payment_success(
    payload: PaymentSuccess,
    checkout: StripeCheckout = Depends(get_checkout),
    db: Database = Depends(get_db),
):
    session = await checkout.retrieve_session(payload.sessionId)
    return await run_in_threadpool(record_order, db, session)
