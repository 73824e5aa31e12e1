from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from server.security import hash_password
from storage import Database, PropertySearch, QueryResult, close_database, get_database
from storage.query_builder import DEFAULT_LIMIT
from telemetry.logging_utils import get_logger

load_dotenv()

logger = get_logger(__name__)


class UserPayload(BaseModel):
    name: str
    email: str
    password: str


class PropertyPayload(BaseModel):
    owner_id: int
    title: str
    description: str = ""
    thumbnail_photo_url: Optional[str] = None
    cover_photo_url: Optional[str] = None
    cost_per_night: int
    parking_spaces: int = 0
    number_of_bathrooms: int = 0
    number_of_bedrooms: int = 0
    country: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    post_code: Optional[str] = None

    model_config = {"extra": "allow"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_database()


app = FastAPI(lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_db() -> Database:
    return get_database()


def _unwrap(result: QueryResult) -> Any:
    if not result.ok:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database query failed.")
    return result.value


def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in user.items() if k != "password"}


@app.get("/api/health")
async def health(db: Database = Depends(get_db)):
    return {"ok": await db.ping()}


@app.get("/api/properties")
async def list_properties(
    city: Optional[str] = None,
    owner_id: Optional[int] = None,
    minimum_price_per_night: Optional[float] = Query(None, allow_inf_nan=False),
    maximum_price_per_night: Optional[float] = Query(None, allow_inf_nan=False),
    minimum_rating: Optional[float] = Query(None, allow_inf_nan=False),
    limit: int = Query(DEFAULT_LIMIT, gt=0),
    db: Database = Depends(get_db),
):
    criteria = PropertySearch(
        city=city,
        owner_id=owner_id,
        minimum_price_per_night=minimum_price_per_night,
        maximum_price_per_night=maximum_price_per_night,
        minimum_rating=minimum_rating,
    )
    properties = _unwrap(await db.get_all_properties(criteria, limit))
    return {"properties": properties}


@app.post("/api/properties", status_code=status.HTTP_201_CREATED)
async def create_property(payload: PropertyPayload, db: Database = Depends(get_db)):
    prop = _unwrap(await db.add_property(payload.model_dump()))
    logger.info("property_added", extra={"property_id": prop["id"], "owner_id": prop["owner_id"]})
    return {"property": prop}


@app.get("/api/reservations")
async def list_reservations(
    guest_id: int,
    limit: int = Query(DEFAULT_LIMIT, gt=0),
    db: Database = Depends(get_db),
):
    reservations = _unwrap(await db.get_all_reservations(guest_id, limit))
    return {"reservations": reservations}


@app.post("/api/users", status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserPayload, db: Database = Depends(get_db)):
    user = _unwrap(
        await db.add_user(
            {
                "name": payload.name.strip(),
                "email": payload.email.strip(),
                "password": hash_password(payload.password),
            }
        )
    )
    if not user:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="User was not created.")
    return {"user": _public_user(user)}


@app.get("/api/users")
async def find_user_by_email(email: str, db: Database = Depends(get_db)):
    user = _unwrap(await db.get_user_with_email(email.strip()))
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return {"user": _public_user(user)}


@app.get("/api/users/{user_id}")
async def get_user(user_id: int, db: Database = Depends(get_db)):
    user = _unwrap(await db.get_user_with_id(user_id))
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return {"user": _public_user(user)}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.app:app", host="0.0.0.0", port=8000, reload=False)
