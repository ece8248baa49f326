# services/checkout.py
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from errors import UpstreamFailure
from schemas import PaymentInfo

logger = logging.getLogger(__name__)

SESSIONS_PATH = "/v1/checkout/sessions"


@dataclass
class CheckoutSession:
    id: str
    status: Optional[str]
    payment_intent: Optional[str]
    amount_total: Optional[int]
    metadata: Dict[str, Any] = field(default_factory=dict)
    url: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.status == "complete"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CheckoutSession":
        payment_intent = data.get("payment_intent")
        # expanded sessions carry the whole intent object
        if isinstance(payment_intent, dict):
            payment_intent = payment_intent.get("id")
        return cls(
            id=data["id"],
            status=data.get("status"),
            payment_intent=payment_intent,
            amount_total=data.get("amount_total"),
            metadata=data.get("metadata") or {},
            url=data.get("url"),
        )


def to_minor_units(price: float) -> int:
    return int(round(price * 100))


class StripeCheckout:
    """Creates and retrieves Stripe Checkout sessions over the REST API."""

    def __init__(self, secret_key: Optional[str], client_domain: str, http: httpx.AsyncClient,
                 api_base: str = "https://api.stripe.com", currency: str = "usd"):
        self.secret_key = secret_key
        self.client_domain = client_domain.rstrip("/")
        self.http = http
        self.api_base = api_base.rstrip("/")
        self.currency = currency

    def _session_form(self, info: PaymentInfo) -> Dict[str, Any]:
        form = {
            "mode": "payment",
            "line_items[0][price_data][currency]": self.currency,
            "line_items[0][price_data][product_data][name]": info.name,
            "line_items[0][price_data][unit_amount]": to_minor_units(info.price),
            "line_items[0][quantity]": info.quantity,
            "customer_email": info.customer.email,
            "metadata[plantId]": info.plantId,
            "metadata[customer]": info.customer.email,
            "success_url": f"{self.client_domain}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{self.client_domain}/plant/{info.plantId}",
        }
        if info.description:
            form["line_items[0][price_data][product_data][description]"] = info.description
        if info.image:
            form["line_items[0][price_data][product_data][images][0]"] = info.image
        return form

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self.secret_key:
            logger.error("STRIPE_SECRET_KEY is not configured.")
            raise UpstreamFailure("Payment provider is not configured.")
        try:
            res = await self.http.request(
                method,
                f"{self.api_base}{path}",
                auth=(self.secret_key, ""),
                timeout=30.0,
                **kwargs,
            )
        except httpx.HTTPError as e:
            logger.error(f"Stripe network error on {method} {path}: {e}")
            raise UpstreamFailure("Payment provider is unreachable.")

        if res.status_code >= 400:
            logger.error(f"Stripe {method} {path} failed with {res.status_code}: {res.text}")
            raise UpstreamFailure("Payment provider rejected the request.")
        return res.json()

    async def create_session(self, info: PaymentInfo) -> str:
        data = await self._request("POST", SESSIONS_PATH, data=self._session_form(info))
        session = CheckoutSession.from_api(data)
        logger.info(f"Created checkout session {session.id} for plant {info.plantId}")
        return session.url

    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        data = await self._request("GET", f"{SESSIONS_PATH}/{quote(session_id, safe='')}")
        return CheckoutSession.from_api(data)
