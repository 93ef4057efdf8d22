"""Table management API endpoints"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.api.auth import get_current_actor, require_role
from tablebook.database import get_db
from tablebook.reservations.table_catalog import InvalidTable, TableCatalog
from tablebook.reservations.types import Actor, Role, TableId
from tablebook.schemas.table import TableCreate, TableResponse

router = APIRouter()


@router.get("", response_model=List[TableResponse])
async def list_tables(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """List tables by zone and number"""
    return await TableCatalog(db).list()


@router.post("", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
async def create_table(
    table_data: TableCreate,
    actor: Actor = Depends(require_role(Role.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Add a table (admin only)"""
    try:
        return await TableCatalog(db).add(**table_data.model_dump())
    except InvalidTable as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_table(
    table_id: int,
    actor: Actor = Depends(require_role(Role.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Remove a table (admin only)"""
    try:
        deleted = await TableCatalog(db).delete(TableId(table_id))
    except InvalidTable as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Table not found")
