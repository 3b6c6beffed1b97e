from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Raw entry: number, numeric string or anything else the caller sent
RawValue = Any


def _drop_blank(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = {}
    for key, value in data.items():
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            continue
        cleaned[key] = value
    return cleaned


class PrescriptionRecord(BaseModel):
    """Eyeglass prescription as entered. Every field is optional; values stay raw."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sphere: Optional[RawValue] = Field(None, description="D")
    cylinder: Optional[RawValue] = Field(None, description="D")
    axis: Optional[RawValue] = Field(None, description="degrees")
    add: Optional[RawValue] = Field(None, description="D")
    pd: Optional[RawValue] = Field(None, description="mm")
    sg: Optional[RawValue] = Field(None, description="segment height, mm")
    vertex_distance: Optional[RawValue] = Field(None, alias="vertexDistance", description="mm")


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = []
    formatted: Dict[str, Union[str, int, float]] = {}

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


@dataclass(frozen=True)
class ConversionDefaults:
    """Values used for fields missing from a contact lens conversion request."""
    cyl: float = 0.0
    axis: float = 0.0
    bv_mm: float = 12.0
    add: float = 0.0


class ConversionInput(BaseModel):
    """Normalised eyeglass prescription for contact lens conversion."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", allow_inf_nan=False)

    sph: float = Field(0.0, alias="SPH")
    cyl: float = Field(0.0, alias="CY")
    axis: float = Field(0.0, alias="AX")
    bv_mm: float = Field(12.0, alias="BV")
    add: float = Field(0.0, alias="ADD")

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return _drop_blank(data)

    @classmethod
    def from_record(cls, record: Dict[str, Any], defaults: ConversionDefaults) -> "ConversionInput":
        """Build from a SPH/CY/AX/BV/ADD mapping, filling gaps from `defaults`."""
        data = _drop_blank(dict(record))
        values = {
            "CY": defaults.cyl,
            "AX": defaults.axis,
            "BV": defaults.bv_mm,
            "ADD": defaults.add,
        }
        for name, field in cls.model_fields.items():
            if name in data:
                values[field.alias] = data[name]
            elif field.alias in data:
                values[field.alias] = data[field.alias]
        return cls.model_validate(values)
