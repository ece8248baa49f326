import logging

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import ORDERS, PLANTS
from errors import InvalidInput, NotFound
from services.checkout import CheckoutSession
from utils import parse_object_id

logger = logging.getLogger(__name__)


def _receipt(transaction_id, order_id):
    return {"transactionId": transaction_id, "orderId": str(order_id)}


def record_order(db: Database, session: CheckoutSession) -> dict:
    """
    Turns a completed checkout session into exactly one order.

    A session whose transaction already has an order (a retried success
    callback) returns that order and leaves the plant stock alone.
    """
    if not session.is_complete:
        raise InvalidInput("Checkout session is not complete.")
    if not session.payment_intent:
        raise InvalidInput("Checkout session has no payment transaction.")

    transaction_id = session.payment_intent
    existing = db[ORDERS].find_one({"transactionId": transaction_id}, {"_id": 1})
    if existing:
        return _receipt(transaction_id, existing["_id"])

    plant_id = session.metadata.get("plantId")
    plant_obj_id = parse_object_id(plant_id, field="plantId")
    plant = db[PLANTS].find_one({"_id": plant_obj_id})
    if not plant:
        raise NotFound("Plant not found.")

    order = {
        "plantId": plant_id,
        "transactionId": transaction_id,
        "customer": session.metadata.get("customer"),
        "status": "pending",
        "seller": plant.get("seller"),
        "image": plant.get("image"),
        "name": plant.get("name"),
        "category": plant.get("category"),
        "quantity": 1,
        "price": (session.amount_total or 0) / 100,
    }

    try:
        result = db[ORDERS].insert_one(order)
    except DuplicateKeyError:
        # a concurrent callback for the same transaction won the insert
        existing = db[ORDERS].find_one({"transactionId": transaction_id}, {"_id": 1})
        return _receipt(transaction_id, existing["_id"])

    db[PLANTS].update_one({"_id": plant_obj_id}, {"$inc": {"quantity": -1}})
    logger.info(f"Recorded order {result.inserted_id} for transaction {transaction_id}")
    return _receipt(transaction_id, result.inserted_id)
