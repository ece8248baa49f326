from fastapi import APIRouter, Depends
from pymongo.database import Database
from typing import Any, Dict, List

from auth import utils as auth_utils
from database import ORDERS, get_db
from utils import fix_ids

router = APIRouter(tags=["Orders"])


@router.get("/orders", response_model=List[Dict[str, Any]])
def get_my_orders(
    email: str = Depends(auth_utils.get_token_email),
    db: Database = Depends(get_db),
):
    return fix_ids(db[ORDERS].find({"customer": email}))


@router.get("/orders/{email}", response_model=List[Dict[str, Any]])
def get_customer_orders(email: str, db: Database = Depends(get_db)):
    return fix_ids(db[ORDERS].find({"customer": email}))


@router.get("/manage-orders/{email}", response_model=List[Dict[str, Any]])
def get_seller_orders(email: str, db: Database = Depends(get_db)):
    return fix_ids(db[ORDERS].find({"seller.email": email}))
