from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.exceptions import ServiceError
from timetable_backend.db.session import get_db

from .schemas import TimetableOutlineCreate, TimetableOutlineResponse, TimetableOutlineUpdate
from . import service

router = APIRouter(prefix="/api/v1/timetables/outlines", tags=["timetable-outlines"])


@router.post("", response_model=TimetableOutlineResponse, status_code=status.HTTP_201_CREATED)
async def create_outline(
    payload: TimetableOutlineCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.create_outline(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("", response_model=List[TimetableOutlineResponse])
async def list_outlines(db: AsyncSession = Depends(get_db)):
    return await service.list_outlines(db)


@router.get("/{outline_id}", response_model=TimetableOutlineResponse)
async def get_outline(
    outline_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.get_outline(db, outline_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.put("/{outline_id}", response_model=TimetableOutlineResponse)
async def update_outline(
    outline_id: UUID,
    payload: TimetableOutlineUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.update_outline(db, outline_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete("/{outline_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_outline(
    outline_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.delete_outline(db, outline_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
