# routers/users.py

from fastapi import APIRouter, Depends
from pymongo.database import Database
from typing import Any, Dict, List

from auth import schemas as auth_schemas, utils as auth_utils
from database import SELLER_REQUESTS, USERS, get_db
from services import accounts_service
from utils import fix_ids, insert_ack

router = APIRouter(tags=["Users"])


@router.get("/users", response_model=List[Dict[str, Any]])
def get_all_users(
    admin_user: Dict = Depends(auth_utils.verify_admin),
    db: Database = Depends(get_db),
):
    return fix_ids(db[USERS].find({"email": {"$ne": admin_user["email"]}}))


@router.post("/become-seller")
def become_seller(
    email: str = Depends(auth_utils.get_token_email),
    db: Database = Depends(get_db),
):
    result = accounts_service.request_seller(db, email)
    return insert_ack(result)


@router.get("/seller-requests", response_model=List[Dict[str, Any]])
def get_seller_requests(
    admin_user: Dict = Depends(auth_utils.verify_admin),
    db: Database = Depends(get_db),
):
    return fix_ids(db[SELLER_REQUESTS].find())


@router.patch("/update-role")
def update_role(
    update: auth_schemas.RoleUpdate,
    admin_user: Dict = Depends(auth_utils.verify_admin),
    db: Database = Depends(get_db),
):
    return accounts_service.change_role(db, update.email, update.role)
