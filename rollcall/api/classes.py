"""Classes and their students."""
from datetime import datetime
from fastapi import APIRouter, HTTPException

from rollcall.api.deps import AdminOnly, Gateway, TeacherOrAdmin, ensure_class_access
from rollcall.models.school_class import SchoolClass, SchoolClassCreate
from rollcall.models.student import Student, StudentCreate, StudentUpdate
from rollcall.services.records import safe_object_id, student_out

router = APIRouter()


def _class_out(c: SchoolClass, role: str) -> dict:
    return {"id": str(c.id), "name": c.name, "description": c.description, "role": role}


@router.get("/classes")
async def list_classes(user: TeacherOrAdmin):
    """All classes for admins, assigned classes for teachers."""
    if user.is_admin:
        classes = await SchoolClass.find_all().sort("name").to_list()
        return [_class_out(c, "admin") for c in classes]
    ids = [oid for oid in (safe_object_id(c) for c in user.assigned_class_ids) if oid]
    if not ids:
        return []
    classes = await SchoolClass.find({"_id": {"$in": ids}}).sort("name").to_list()
    return [_class_out(c, "teacher") for c in classes]


@router.post("/classes", status_code=201)
async def create_class(data: SchoolClassCreate, user: AdminOnly):
    cls = SchoolClass(name=data.name.strip(), description=data.description)
    await cls.insert()
    return _class_out(cls, "admin")


@router.get("/classes/{class_id}")
async def get_class(class_id: str, user: TeacherOrAdmin):
    ensure_class_access(user, class_id)
    oid = safe_object_id(class_id)
    cls = await SchoolClass.get(oid) if oid else None
    if not cls:
        raise HTTPException(status_code=404, detail="Class not found")
    return _class_out(cls, "admin" if user.is_admin else "teacher")


@router.get("/classes/{class_id}/students")
async def list_class_students(class_id: str, user: TeacherOrAdmin, gateway: Gateway):
    """Active students, in roster order."""
    ensure_class_access(user, class_id)
    return await gateway.list_active_students(class_id)


@router.post("/students", status_code=201)
async def create_student(data: StudentCreate, user: AdminOnly):
    oid = safe_object_id(data.class_id)
    if not oid or not await SchoolClass.get(oid):
        raise HTTPException(status_code=404, detail="Class not found")
    student = Student(full_name=data.full_name.strip(), class_id=data.class_id)
    await student.insert()
    return student_out(student)


@router.patch("/students/{student_id}")
async def update_student(student_id: str, data: StudentUpdate, user: AdminOnly):
    """Rename, move or (de)activate a student. Records are never deleted."""
    oid = safe_object_id(student_id)
    student = await Student.get(oid) if oid else None
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    update = data.model_dump(exclude_unset=True)
    for field, value in update.items():
        setattr(student, field, value)
    student.updated_at = datetime.utcnow()
    await student.save()
    return student_out(student)
