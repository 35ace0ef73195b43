"""Teacher accounts and class assignments (admin only)."""
from fastapi import APIRouter, HTTPException

from rollcall.api.deps import AdminOnly, get_password_hash
from rollcall.models.school_class import SchoolClass
from rollcall.models.user import User, UserCreate, UserInDB, UserRole
from rollcall.services.records import safe_object_id

router = APIRouter()

MAX_TEACHERS_PER_CLASS = 2


def _user_out(u: User) -> UserInDB:
    return UserInDB(
        id=str(u.id),
        cpf=u.cpf,
        role=u.role,
        full_name=u.full_name,
        is_active=u.is_active,
        assigned_class_ids=u.assigned_class_ids,
    )


@router.get("/", response_model=list[UserInDB])
async def list_users(user: AdminOnly):
    users = await User.find_all().sort("full_name").to_list()
    return [_user_out(u) for u in users]


@router.post("/", response_model=UserInDB, status_code=201)
async def create_user(data: UserCreate, user: AdminOnly):
    if await User.find_one(User.cpf == data.cpf):
        raise HTTPException(status_code=400, detail="CPF already registered")
    new_user = User(
        cpf=data.cpf,
        hashed_password=get_password_hash(data.password),
        role=data.role,
        full_name=data.full_name,
        assigned_class_ids=data.assigned_class_ids,
    )
    await new_user.insert()
    return _user_out(new_user)


@router.post("/{user_id}/classes/{class_id}", response_model=UserInDB)
async def assign_class(user_id: str, class_id: str, user: AdminOnly):
    """Assign a teacher to a class; a class takes at most two teachers."""
    oid = safe_object_id(user_id)
    teacher = await User.get(oid) if oid else None
    if not teacher:
        raise HTTPException(status_code=404, detail="User not found")
    class_oid = safe_object_id(class_id)
    if not class_oid or not await SchoolClass.get(class_oid):
        raise HTTPException(status_code=404, detail="Class not found")
    if class_id in teacher.assigned_class_ids:
        raise HTTPException(status_code=400, detail="Teacher is already assigned to this class")

    assigned = await User.find({"assigned_class_ids": class_id, "role": UserRole.TEACHER.value}).count()
    if assigned >= MAX_TEACHERS_PER_CLASS:
        raise HTTPException(status_code=400, detail="Class already has the maximum of 2 teachers")

    teacher.assigned_class_ids.append(class_id)
    await teacher.save()
    return _user_out(teacher)
