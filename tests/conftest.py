import mongomock
import pytest
from fastapi.testclient import TestClient

from config.settings import Settings
from errors import Unauthorized
from main import create_app
from services.checkout import CheckoutSession, to_minor_units


class FakeVerifier:
    """Maps bearer tokens straight to emails."""

    def __init__(self):
        self.tokens = {}

    async def verify(self, token):
        if token not in self.tokens:
            raise Unauthorized()
        return self.tokens[token]


class FakeCheckout:
    def __init__(self):
        self.sessions = {}
        self.created = []

    async def create_session(self, info):
        self.created.append(info)
        return f"https://checkout.stripe.test/pay/{info.plantId}?amount={to_minor_units(info.price)}"

    async def retrieve_session(self, session_id):
        return self.sessions[session_id]

    def add_session(self, session_id, plant_id, status="complete", payment_intent="pi_123",
                    customer="buyer@example.com", amount_total=2500):
        self.sessions[session_id] = CheckoutSession(
            id=session_id,
            status=status,
            payment_intent=payment_intent,
            amount_total=amount_total,
            metadata={"plantId": plant_id, "customer": customer},
        )


@pytest.fixture
def db():
    return mongomock.MongoClient()["Plantora_Test"]


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def checkout():
    return FakeCheckout()


@pytest.fixture
def client(db, verifier, checkout):
    settings = Settings(CLIENT_DOMAIN="http://localhost:5173", LOG_LEVEL="WARNING")
    app = create_app(settings=settings, db=db, checkout=checkout, verifier=verifier)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(db, verifier):
    """Registers a user with a role and returns auth headers for them."""

    def _login(email, role="customer"):
        db["Users"].update_one({"email": email}, {"$set": {"role": role}}, upsert=True)
        token = f"token-{email}"
        verifier.tokens[token] = email
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture
def plant(db):
    doc = {
        "name": "Monstera",
        "description": "Split-leaf philodendron",
        "image": "https://img.example.com/monstera.jpg",
        "price": 25.0,
        "quantity": 5,
        "category": "Indoor",
        "seller": {"name": "Sam Seller", "email": "seller@example.com"},
    }
    doc["_id"] = db["Plants"].insert_one(doc).inserted_id
    return doc
