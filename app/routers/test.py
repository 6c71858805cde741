# app/routers/test.py

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from app.schemas.user import User
from app.services.cache_aside import cache_aside
from app.services.users_service import UserData, get_user_data

router = APIRouter(prefix="/test", tags=["test"])


@router.get("", response_model=List[User])
@cache_aside("test-all", identity="Test.GetByStatus")
async def get_by_status(status: Optional[bool] = None, data: UserData = Depends(get_user_data)):
    """
    GET /test?status=
      - no status: every user
      - true: active users only
      - false: inactive users only
    Cached per status value under the "test-all" schema.
    """
    if status is None:
        return await data.get_all()
    if status:
        return await data.get_all_actives()
    return await data.get_all_inactives()


@router.get("/{uuid}", response_model=User)
@cache_aside("test-by-id", identity="Test.Get")
async def get(uuid: UUID, data: UserData = Depends(get_user_data)):
    """
    GET /test/{uuid}

    Status codes:
      - 200: Found (cached under the "test-by-id" schema)
      - 404: Unknown uuid (never cached)
      - 422: uuid is not a UUID
    """
    user = await data.get_by_id(uuid)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user
