from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database

from . import schemas, utils
from database import USERS, get_db
from errors import NotFound
from services import accounts_service

router = APIRouter(
    tags=["Authentication"]
)


# save or update a user on every login
@router.post("/user")
def save_user(user: schemas.UserLogin, db: Database = Depends(get_db)):
    profile = user.model_dump(exclude_none=True)
    email = profile.pop("email")
    return accounts_service.upsert_user(db, email, profile)


@router.get("/user/role", response_model=schemas.RoleInfo)
async def get_user_role(
    email: str = Depends(utils.get_token_email),
    db: Database = Depends(get_db),
):
    user = await run_in_threadpool(db[USERS].find_one, {"email": email}, {"role": 1})
    if not user or not user.get("role"):
        raise NotFound("User not found.")
    return {"role": user["role"]}
