# database.py

import logging

from fastapi import Request
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.server_api import ServerApi

logger = logging.getLogger(__name__)

# --- Collection names ---
PLANTS = "Plants"
ORDERS = "Orders"
USERS = "Users"
SELLER_REQUESTS = "become-seller"


def connect(uri: str) -> MongoClient:
    if not uri:
        raise RuntimeError("MONGODB_URI is not configured.")
    return MongoClient(uri, server_api=ServerApi("1", strict=True, deprecation_errors=True))


def ping(client: MongoClient):
    client.admin.command("ping")
    logger.info("Pinged your deployment. You successfully connected to MongoDB!")


def ensure_indexes(db: Database):
    """Unique keys backing the one-order-per-transaction and one-user-per-email rules."""
    db[ORDERS].create_index([("transactionId", ASCENDING)], unique=True)
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[SELLER_REQUESTS].create_index([("email", ASCENDING)], unique=True)
    db[PLANTS].create_index([("seller.email", ASCENDING)])
    db[ORDERS].create_index([("customer", ASCENDING)])
    db[ORDERS].create_index([("seller.email", ASCENDING)])


# --- Dependency ---
def get_db(request: Request) -> Database:
    return request.app.state.db
