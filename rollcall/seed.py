"""Seed the admin login and, optionally, a demo class."""
import logging

from rollcall.api.deps import get_password_hash
from rollcall.config import settings
from rollcall.models.school_class import SchoolClass
from rollcall.models.student import Student
from rollcall.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEMO_TEACHER_CPF = "123456789"
DEMO_CLASS_NAME = "Escola Sabatina - Classe Adultos"
DEMO_STUDENTS = [
    "Ana Silva",
    "Carlos Oliveira",
    "Maria Santos",
    "João Pereira",
    "Juliana Costa",
    "Roberto Almeida",
    "Fernanda Lima",
    "Paulo Souza",
]


async def seed_admin():
    existing = await User.find_one(User.cpf == settings.admin_cpf)
    if existing:
        return
    await User(
        cpf=settings.admin_cpf,
        hashed_password=get_password_hash(settings.admin_password),
        role=UserRole.ADMIN,
        full_name=settings.admin_full_name,
    ).insert()
    logger.info("Admin user created")


async def seed_demo_class():
    """Demo teacher (password 123456) with one class of eight students."""
    if await User.find_one(User.cpf == DEMO_TEACHER_CPF):
        return
    cls = SchoolClass(name=DEMO_CLASS_NAME)
    await cls.insert()
    await User(
        cpf=DEMO_TEACHER_CPF,
        hashed_password=get_password_hash("123456"),
        role=UserRole.TEACHER,
        full_name="Professor Demo",
        assigned_class_ids=[str(cls.id)],
    ).insert()
    for name in DEMO_STUDENTS:
        await Student(full_name=name, class_id=str(cls.id)).insert()
    logger.info("Demo class seeded with %d students", len(DEMO_STUDENTS))
