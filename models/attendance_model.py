# models/attendance_model.py
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from utils.coercion import coerce_flag, coerce_int, coerce_str


class AttendanceRecord(BaseModel):
    """One absence or lateness row, offsets in minutes from midnight."""
    model_config = ConfigDict(populate_by_name=True)

    student_id: str = Field("", alias="CODE_APPRENANT")
    student_last_name: str = Field("", alias="NOM_APPRENANT")
    student_first_name: str = Field("", alias="PRENOM_APPRENANT")
    start_offset_minutes: int = Field(0, alias="HEURE_DEBUT")
    end_offset_minutes: int = Field(0, alias="HEURE_FIN")
    is_justified: bool = Field(False, alias="IS_JUSTIFIE")
    is_late: bool = Field(False, alias="IS_RETARD")

    @field_validator("student_id", "student_last_name", "student_first_name", mode="before")
    @classmethod
    def _as_text(cls, value):
        return coerce_str(value)

    @field_validator("start_offset_minutes", "end_offset_minutes", mode="before")
    @classmethod
    def _as_minutes(cls, value, info: ValidationInfo):
        report = (info.context or {}).get("report")
        return coerce_int(value, report=report, label=info.field_name)

    @field_validator("is_justified", "is_late", mode="before")
    @classmethod
    def _as_flag(cls, value):
        return coerce_flag(value)

    @property
    def duration(self) -> int:
        return self.end_offset_minutes - self.start_offset_minutes


class AttendanceSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    student_id: str = Field(alias="CODE_APPRENANT")
    student_last_name: str = Field("", alias="NOM_APPRENANT")
    student_first_name: str = Field("", alias="PRENOM_APPRENANT")
    justified_duration: str = Field("00h00", alias="TOTAL_JUSTIFIEE")
    unjustified_duration: str = Field("00h00", alias="TOTAL_NON_JUSTIFIEE")
    late_duration: str = Field("00h00", alias="TOTAL_RETARD")
