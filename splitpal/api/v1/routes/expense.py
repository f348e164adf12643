from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from splitpal.core.dependencies import get_db
from splitpal.schemas.expense import ExpenseCreate, ExpenseOut
from splitpal.services.expense_services import create_expense, list_group_expenses

router = APIRouter()

@router.post("/{group_id}/expenses", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
async def add_expense(group_id: int, data: ExpenseCreate, db: AsyncSession = Depends(get_db)):
    return await create_expense(db, group_id, data)

@router.get("/{group_id}/expenses", response_model=list[ExpenseOut])
async def all_expenses(group_id: int, db: AsyncSession = Depends(get_db)):
    return await list_group_expenses(db, group_id)
