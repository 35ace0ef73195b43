"""Weekly missionary activity counts, one record per class and date."""
from datetime import datetime
from typing import Optional

import pymongo
from beanie import Document, Indexed
from pydantic import BaseModel, Field, NonNegativeInt


class MissionaryActivity(Document):
    class_id: Indexed(str)
    date: str  # YYYY-MM-DD
    qtd_contatos_missionarios: int = 0
    literaturas_distribuidas: int = 0
    visitas_missionarias: int = 0
    estudos_biblicos: int = 0
    pessoas_auxiliadas: int = 0
    pessoas_trazidas_igreja: int = 0
    visitantes: int = 0
    record_date: datetime = Field(default_factory=datetime.utcnow)
    created_by: Optional[str] = None  # user_id

    class Settings:
        name = "missionary_activities"
        use_state_management = True
        indexes = [
            pymongo.IndexModel(
                [("class_id", pymongo.ASCENDING), ("date", pymongo.ASCENDING)],
                unique=True,
            ),
        ]


class MissionaryActivityCreate(BaseModel):
    class_id: str
    date: str
    qtd_contatos_missionarios: NonNegativeInt = 0
    literaturas_distribuidas: NonNegativeInt = 0
    visitas_missionarias: NonNegativeInt = 0
    estudos_biblicos: NonNegativeInt = 0
    pessoas_auxiliadas: NonNegativeInt = 0
    pessoas_trazidas_igreja: NonNegativeInt = 0
    visitantes: NonNegativeInt = 0
