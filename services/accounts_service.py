import logging
from datetime import datetime, timezone

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from database import SELLER_REQUESTS, USERS
from errors import Conflict, NotFound, UpstreamFailure

logger = logging.getLogger(__name__)

PROTECTED_PROFILE_FIELDS = ("_id", "email", "role", "created_at", "last_loggedIn")


def upsert_user(db: Database, email: str, profile: dict):
    """
    Records a login. First sight creates the user as a customer with the given
    profile; later logins only refresh `last_loggedIn`.
    """
    now = datetime.now(timezone.utc)
    on_insert = {k: v for k, v in profile.items() if k not in PROTECTED_PROFILE_FIELDS}
    on_insert.update({"created_at": now, "role": "customer"})

    result = db[USERS].update_one(
        {"email": email},
        {"$set": {"last_loggedIn": now}, "$setOnInsert": on_insert},
        upsert=True,
    )
    if result.upserted_id is not None:
        logger.info(f"Created user {email}")
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedId": str(result.upserted_id) if result.upserted_id is not None else None,
    }


def request_seller(db: Database, email: str):
    if db[SELLER_REQUESTS].find_one({"email": email}):
        raise Conflict("You have already requested, wait for approval.")
    try:
        result = db[SELLER_REQUESTS].insert_one({"email": email, "requested_at": datetime.now(timezone.utc)})
    except DuplicateKeyError:
        raise Conflict("You have already requested, wait for approval.")
    logger.info(f"Seller request filed by {email}")
    return result


def change_role(db: Database, email: str, role: str) -> dict:
    """
    Sets a user's role and clears their pending seller request.

    The two writes are a compensating pair rather than a transaction: if the
    request cannot be removed, the previous role is put back.
    """
    previous = db[USERS].find_one_and_update(
        {"email": email},
        {"$set": {"role": role}},
        projection={"role": 1},
        return_document=ReturnDocument.BEFORE,
    )
    if previous is None:
        raise NotFound("User not found.")

    try:
        removed = db[SELLER_REQUESTS].delete_one({"email": email})
    except PyMongoError as e:
        logger.error(f"Could not clear seller request for {email}, restoring role: {e}")
        db[USERS].update_one({"email": email}, {"$set": {"role": previous.get("role")}})
        raise UpstreamFailure("Role change was rolled back.")

    logger.info(f"Role of {email} changed from {previous.get('role')} to {role}")
    return {
        "email": email,
        "role": role,
        "previousRole": previous.get("role"),
        "requestRemoved": removed.deleted_count > 0,
    }
