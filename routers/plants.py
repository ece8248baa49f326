from fastapi import APIRouter, Depends
from pymongo.database import Database
from typing import Any, Dict, List, Optional

from database import PLANTS, get_db
from schemas import PlantCreate
from utils import fix_id, fix_ids, insert_ack, parse_object_id

router = APIRouter(tags=["Plants"])


@router.post("/plants")
def add_plant(plant: PlantCreate, db: Database = Depends(get_db)):
    result = db[PLANTS].insert_one(plant.model_dump())
    return insert_ack(result)


@router.get("/plants", response_model=List[Dict[str, Any]])
def get_plants(db: Database = Depends(get_db)):
    return fix_ids(db[PLANTS].find())


@router.get("/plants/{plant_id}", response_model=Optional[Dict[str, Any]])
def get_plant(plant_id: str, db: Database = Depends(get_db)):
    # a well-formed id that matches nothing answers null, not 404
    return fix_id(db[PLANTS].find_one({"_id": parse_object_id(plant_id)}))


# get all plants for a seller by email
@router.get("/inventory/{email}", response_model=List[Dict[str, Any]])
def get_seller_inventory(email: str, db: Database = Depends(get_db)):
    return fix_ids(db[PLANTS].find({"seller.email": email}))
