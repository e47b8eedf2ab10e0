# models/bulletin_model.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional, Set

from models.attendance_model import AttendanceSummary

Row = Dict[str, Any]


class ExtractionRequest(BaseModel):
    """Body of POST /api/sql, as sent by the configuration form."""
    model_config = ConfigDict(populate_by_name=True)

    campus: int
    group: int
    semester: Optional[str] = None
    period_code: Optional[int] = Field(None, alias="periodeEvaluationCode")
    period: Optional[str] = Field(None, alias="periodeEvaluation")

    @field_validator("period_code", mode="before")
    @classmethod
    def _blank_period_code(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value


class BulletinData(BaseModel):
    """Query results keyed by query name; unknown keys are ignored."""
    model_config = ConfigDict(extra="ignore")

    APPRENANT: List[Row] = []
    MOYENNES_UE: List[Row] = []
    MOYENNE_GENERALE: List[Row] = []
    OBSERVATIONS: List[Row] = []
    ECTS_PAR_MATIERE: List[Row] = []
    ABSENCES: List[Row] = []
    GROUPE: List[Row] = []
    SITE: List[Row] = []

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value


class BulletinRequest(BaseModel):
    """Body of POST /api/pdf."""
    model_config = ConfigDict(populate_by_name=True)

    data: Optional[BulletinData] = None
    period: str = Field("Période non spécifiée", alias="periodeEvaluation")
    group_name: str = Field("Groupe non spécifié", alias="groupName")

    @field_validator("period", "group_name", mode="before")
    @classmethod
    def _blank_as_default(cls, value, info):
        if value is None or (isinstance(value, str) and value.strip() == ""):
            return cls.model_fields[info.field_name].default
        return value


class StudentBulletin(BaseModel):
    """Everything needed to draw one student's transcript."""

    student_id: str
    last_name: str = ""
    first_name: str = ""
    birth_date: Optional[Any] = None
    period: str = ""
    grades: List[Row] = []
    credits: Dict[str, float] = {}
    unit_codes: Set[str] = set()
    general_average: Optional[Any] = None
    observation: Optional[str] = None
    absences: Optional[AttendanceSummary] = None
    group: Optional[Row] = None
    campus: Optional[Row] = None

    @property
    def filename(self) -> str:
        name = f"{self.last_name}_{self.first_name}_{self.student_id}.pdf"
        return name.replace("/", "-").replace("\\", "-")
