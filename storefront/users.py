# storefront/users.py
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from . import crud
from .db import get_db
from .exceptions import NotFoundError, ValidationError

router = APIRouter(prefix="/api/users", tags=["users"])


class UserIn(BaseModel):
    name: Optional[str] = None


def _require_name(payload: UserIn) -> str:
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("name required")
    return name


@router.get("")
async def list_users(db: AsyncSession = Depends(get_db)):
    return [crud.user_out(u) for u in await crud.list_users(db)]

@router.get("/{user_id}")
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await crud.get_user(db, user_id)
    if not user:
        raise NotFoundError("user", user_id, message="User not found")
    return crud.user_out(user)

@router.post("", status_code=201)
async def create_user(payload: UserIn, db: AsyncSession = Depends(get_db)):
    user = await crud.create_user(db, _require_name(payload))
    return crud.user_out(user)

@router.put("/{user_id}")
async def update_user(user_id: int, payload: UserIn, db: AsyncSession = Depends(get_db)):
    name = _require_name(payload)
    user = await crud.update_user(db, user_id, name)
    if not user:
        raise NotFoundError("user", user_id, message="User not found")
    return crud.user_out(user)

@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    if not await crud.delete_user(db, user_id):
        raise NotFoundError("user", user_id, message="User not found")
    return Response(status_code=204)
