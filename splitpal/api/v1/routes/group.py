from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from splitpal.core.dependencies import get_db
from splitpal.services.group_services import create_group, list_groups, get_group_detail, add_member, update_member_upi
from splitpal.schemas.group import GroupCreate, GroupDetailOut, GroupOut, GroupSummaryOut, MemberCreate, MemberOut, MemberUpdate

router = APIRouter()

@router.post("/", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
async def create_new_group(data: GroupCreate, db: AsyncSession = Depends(get_db)):
    return await create_group(db, data.name)

@router.get("/", response_model=list[GroupSummaryOut])
async def all_groups(db: AsyncSession = Depends(get_db)):
    return await list_groups(db)

@router.get("/{group_id}", response_model=GroupDetailOut)
async def group_detail(group_id: int, db: AsyncSession = Depends(get_db)):
    return await get_group_detail(db, group_id)

@router.post("/{group_id}/members", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
async def add_group_member(group_id: int, data: MemberCreate, db: AsyncSession = Depends(get_db)):
    return await add_member(db, group_id, data.name, data.upi_id)

@router.patch("/{group_id}/members/{member_id}", response_model=MemberOut)
async def edit_member(group_id: int, member_id: int, data: MemberUpdate, db: AsyncSession = Depends(get_db)):
    return await update_member_upi(db, group_id, member_id, data.upi_id)
