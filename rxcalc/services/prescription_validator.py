"""
Eyeglass Prescription Validator

Validates and formats the individual fields of an eyeglass prescription
(SPH, CYL, AXIS, ADD, PD, segment height, vertex distance), checks the
SPH/CYL/AXIS presence rules and transposes plus-cylinder notation into
minus-cylinder notation.

Invalid input never raises: field validators return None, whole
prescriptions return a ValidationResult carrying every error found.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from rxcalc.models.schema import PrescriptionRecord, ValidationResult
from rxcalc.services.optics import (
    format_power,
    is_multiple_of_quarter,
    round_half_away,
    to_number,
)

log = logging.getLogger(__name__)

COMBO_ERROR = "CYL and AXIS must be entered together, or both left empty."
SPH_ERROR = "SPH must be multiple of 0.25 and between -60.00 and +60.00."
CYL_ERROR = "CYL must be multiple of 0.25 and between -15.00 and +15.00."
AXIS_ERROR = "AXIS must be an integer between 0 and 180."
ADD_ERROR = "ADD must be multiple of 0.25 and between +0.25 and +6.00."
PD_ERROR = "PD must be an integer between 19 and 85."
SG_ERROR = "SG must be between 7 and 50."
VD_ERROR = "Vertex Distance must be between 10 and 15."

# (min, max) inclusive
SPH_RANGE = (-60.0, 60.0)
CYL_RANGE = (-15.0, 15.0)
AXIS_RANGE = (0.0, 180.0)
ADD_RANGE = (0.25, 6.0)
PD_RANGE = (19.0, 85.0)
SG_RANGE = (7.0, 50.0)
VD_RANGE = (10.0, 15.0)


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _plain_number(value: float) -> Union[int, float]:
    return int(value) if value.is_integer() else value


def _in_range(value: float, bounds) -> bool:
    low, high = bounds
    return low <= value <= high


class PrescriptionValidator:
    """Field-level and whole-prescription validation for eyeglasses."""

    def _validate_power(self, value: Any, bounds) -> Optional[str]:
        num = to_number(value)
        if num is None:
            return None
        if not _in_range(num, bounds):
            return None
        if not is_multiple_of_quarter(num):
            return None
        return format_power(num)

    def _validate_measure(self, value: Any, bounds) -> Optional[Union[int, float]]:
        num = to_number(value)
        if num is None or not _in_range(num, bounds):
            return None
        return _plain_number(num)

    def validate_sph(self, value: Any) -> Optional[str]:
        """Sphere: quarter multiple in [-60, +60]. Returns e.g. "-03.50"."""
        return self._validate_power(value, SPH_RANGE)

    def validate_cyl(self, value: Any) -> Optional[str]:
        """Cylinder: quarter multiple in [-15, +15]."""
        return self._validate_power(value, CYL_RANGE)

    def validate_add(self, value: Any) -> Optional[str]:
        """Addition: quarter multiple in [+0.25, +6.00]."""
        return self._validate_power(value, ADD_RANGE)

    def validate_axis(self, value: Any) -> Optional[int]:
        """Axis in [0, 180] degrees, rounded to the nearest degree."""
        num = to_number(value)
        if num is None or not _in_range(num, AXIS_RANGE):
            return None
        return int(round_half_away(num))

    def validate_pd(self, value: Any) -> Optional[Union[int, float]]:
        return self._validate_measure(value, PD_RANGE)

    def validate_sg(self, value: Any) -> Optional[Union[int, float]]:
        return self._validate_measure(value, SG_RANGE)

    def validate_vertex_distance(self, value: Any) -> Optional[Union[int, float]]:
        return self._validate_measure(value, VD_RANGE)

    def check_sph_cyl_axis_combo(self, sph: Any, cyl: Any, axis: Any) -> bool:
        """
        Check the SPH/CYL/AXIS presence pattern.

        Valid patterns: SPH only, SPH + CYL + AXIS, CYL + AXIS.
        A cylinder of 0 counts as absent. All-empty is not valid.
        """
        has_sph = _is_present(sph)
        has_axis = _is_present(axis)
        has_cyl = _is_present(cyl) and to_number(cyl) != 0

        if has_sph and not has_cyl and not has_axis:
            return True
        if has_cyl and has_axis:
            return True
        return False

    def transform_sph_cyl_axis(self, sph: Any, cyl: Any, axis: Any) -> Optional[Dict[str, Any]]:
        """
        Transpose a plus-cylinder prescription into minus-cylinder form.

        Args:
            sph: Sphere power (D); empty counts as 0
            cyl: Cylinder power (D), must be > 0
            axis: Cylinder axis (degrees)

        Returns:
            {"sph": str, "cyl": str, "axis": int}, or None when the cylinder is
            not strictly positive, an input is not numeric or the transposed
            axis falls outside [0, 180].
        """
        # A cylinder + axis prescription may leave the sphere empty
        sph_num = to_number(sph) if _is_present(sph) else 0.0
        cyl_num = to_number(cyl)
        axis_num = to_number(axis)
        if sph_num is None or cyl_num is None or axis_num is None:
            return None
        if cyl_num <= 0:
            return None

        new_sph = sph_num + cyl_num
        new_cyl = -abs(cyl_num)
        raw_axis = axis_num - 90 if axis_num > 90 else axis_num + 90

        new_axis = self.validate_axis(raw_axis)
        if new_axis is None:
            log.debug("Transposed axis %s out of range", raw_axis,
                      extra={"operation": "transform_sph_cyl_axis"})
            return None

        return {
            "sph": format_power(new_sph),
            "cyl": format_power(new_cyl),
            "axis": new_axis,
        }

    def validate_prescription(self, data: Union[Mapping[str, Any], PrescriptionRecord]) -> ValidationResult:
        """
        Validate a complete prescription.

        Runs the SPH/CYL/AXIS combo check first and stops there on failure.
        Otherwise every present field is validated on its own; all failures
        are collected and passing fields are copied into `formatted`.
        """
        record = data if isinstance(data, PrescriptionRecord) else PrescriptionRecord.model_validate(data)

        if not self.check_sph_cyl_axis_combo(record.sphere, record.cylinder, record.axis):
            log.debug("Rejected SPH/CYL/AXIS combination", extra={"operation": "validate_prescription"})
            return ValidationResult(valid=False, errors=[COMBO_ERROR], formatted={})

        checks = [
            ("sphere", self.validate_sph, SPH_ERROR),
            ("cylinder", self.validate_cyl, CYL_ERROR),
            ("axis", self.validate_axis, AXIS_ERROR),
            ("add", self.validate_add, ADD_ERROR),
            ("pd", self.validate_pd, PD_ERROR),
            ("sg", self.validate_sg, SG_ERROR),
            ("vertex_distance", self.validate_vertex_distance, VD_ERROR),
        ]

        errors = []
        formatted = {}
        for field, check, message in checks:
            value = getattr(record, field)
            if not _is_present(value):
                continue
            result = check(value)
            if result is None:
                errors.append(message)
            else:
                formatted[field] = result

        if errors:
            log.debug("Prescription has %d invalid field(s)", len(errors),
                      extra={"operation": "validate_prescription"})
        return ValidationResult(valid=not errors, errors=errors, formatted=formatted)
