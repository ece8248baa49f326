from bson import ObjectId
from bson.errors import InvalidId

from errors import InvalidInput


def parse_object_id(value, field="id") -> ObjectId:
    # ObjectId(None) would mint a fresh id instead of failing
    if not isinstance(value, str):
        raise InvalidInput(f"Invalid {field} format: '{value}'")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidInput(f"Invalid {field} format: '{value}'")


def fix_id(doc):
    """
    Converts the ObjectId `_id` of a document to its hex string so the
    document can go straight into a JSON response.
    """
    if not doc:
        return None
    doc["_id"] = str(doc["_id"])
    return doc


def fix_ids(cursor):
    return [fix_id(doc) for doc in cursor]


def insert_ack(result):
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}
