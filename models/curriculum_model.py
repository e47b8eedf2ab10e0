# models/curriculum_model.py
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from utils.coercion import coerce_float, coerce_int, coerce_str

UNIT_TYPE = "2"  # curriculum unit (UE): credits are derived
LEAF_TYPE = "3"  # subject: credits are authored


class CurriculumItem(BaseModel):
    """
    One row of a student's curriculum (ECTS_PAR_MATIERE).

    Columns the service does not know about are kept as extra fields and
    written back unchanged by `model_dump(by_alias=True)`.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    student_id: str = Field("", alias="CODE_APPRENANT")
    subject_code: str = Field("", alias="CODE_MATIERE")
    subject_name: str = Field("", alias="NOM_MATIERE")
    item_type_code: str = Field("", alias="CODE_TYPE_MATIERE")
    order_index: int = Field(0, alias="NUM_ORDRE")
    credit_value: float = Field(0.0, alias="CREDIT_ECTS")

    @field_validator("student_id", "subject_code", "subject_name", "item_type_code", mode="before")
    @classmethod
    def _as_text(cls, value):
        return coerce_str(value)

    @field_validator("order_index", mode="before")
    @classmethod
    def _as_order(cls, value, info: ValidationInfo):
        report = (info.context or {}).get("report")
        return coerce_int(value, report=report, label=info.field_name)

    @field_validator("credit_value", mode="before")
    @classmethod
    def _as_credits(cls, value, info: ValidationInfo):
        report = (info.context or {}).get("report")
        return coerce_float(value, report=report, label=info.field_name)

    @property
    def key(self) -> str:
        return f"{self.student_id}_{self.subject_code}"

    @property
    def is_unit(self) -> bool:
        return self.item_type_code == UNIT_TYPE

    @property
    def is_leaf(self) -> bool:
        return self.item_type_code == LEAF_TYPE
