"""
Contact Lens Converter

Converts eyeglass prescriptions into contact lens prescriptions:
- Spheric: spherical equivalent, vertex compensated above a power threshold
- Toric: each principal meridian vertex compensated on its own, which keeps
  the astigmatic correction intact

Powers are rounded to the nearest quarter diopter; the unrounded values are
returned alongside as "Exact SPH" / "Exact CY".

Example:
    >>> ContactLensConverter().convert_to_spheric({"SPH": -7.00, "CY": -1.00, "AX": 90, "BV": 12})
    {'SPH': '-07.00', 'ADD': '+00.00', 'Exact SPH': '-06.88', 'AX': '', 'BV': 12.0}
"""

import logging
import math
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from rxcalc.config import settings
from rxcalc.models.schema import ConversionDefaults, ConversionInput
from rxcalc.services.optics import (
    format_power,
    format_result_to_quarter,
    round_half_away,
    round_to_nearest_quarter,
    spherical_equivalent,
    vertex_compensate,
)

log = logging.getLogger(__name__)

LENS_TYPES: Dict[str, str] = {
    "spheric": "Spherical lens - spherical equivalent, no axis",
    "toric": "Toric lens - sphere and cylinder compensated per meridian",
}


def get_available_lens_types() -> Dict[str, str]:
    """Get available lens type keys and descriptions."""
    return dict(LENS_TYPES)


class ContactLensConverter:
    """Eyeglass to contact lens prescription converter."""

    def __init__(self, defaults: Optional[ConversionDefaults] = None,
                 compensation_threshold: Optional[float] = None):
        if defaults is None:
            defaults = ConversionDefaults(bv_mm=settings.default_vertex_distance_mm)
        if compensation_threshold is None:
            compensation_threshold = settings.vertex_compensation_threshold_d
        self.defaults = defaults
        # Spheric powers at or below this magnitude (D) are not vertex compensated
        self.compensation_threshold = compensation_threshold

    def spherical_equivalent(self, sphere: float, cylinder: float) -> float:
        return spherical_equivalent(sphere, cylinder)

    def vertex_compensate(self, power: float, vertex_distance_mm: float) -> float:
        return vertex_compensate(power, vertex_distance_mm)

    def _parse(self, data: Mapping[str, Any], operation: str) -> Optional[ConversionInput]:
        try:
            return ConversionInput.from_record(data, self.defaults)
        except ValidationError as e:
            log.warning("Rejected non-numeric prescription input: %s", e.errors(include_url=False),
                        extra={"operation": operation})
            return None

    def convert_to_spheric(self, data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Convert to a spherical contact lens prescription.

        Args:
            data: SPH, CY, AX, BV (mm), ADD as numbers or numeric strings;
                missing fields fall back to the converter defaults

        Returns:
            {"SPH", "ADD", "Exact SPH", "AX": "", "BV"}, or None when the input
            is not numeric or the compensated power is undefined.
        """
        rx = self._parse(data, "convert_to_spheric")
        if rx is None:
            return None

        total_sphere = self.spherical_equivalent(rx.sph, rx.cyl) if rx.cyl != 0 else rx.sph

        if abs(total_sphere) > self.compensation_threshold:
            contact_power = self.vertex_compensate(total_sphere, rx.bv_mm)
        else:
            contact_power = total_sphere

        if not math.isfinite(contact_power):
            log.warning("Vertex compensation undefined for %.2f D at %.1f mm", total_sphere, rx.bv_mm,
                        extra={"operation": "convert_to_spheric"})
            return None

        nearest = round_to_nearest_quarter(contact_power)
        log.debug("SE %.2f D -> CL %.4f D -> %.2f D", total_sphere, contact_power, nearest,
                  extra={"operation": "convert_to_spheric"})

        value: Dict[str, Any] = format_result_to_quarter({"SPH": nearest, "ADD": rx.add})
        value["Exact SPH"] = format_power(contact_power)
        value["AX"] = ""
        value["BV"] = rx.bv_mm
        return value

    def convert_to_toric(self, data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Convert to a toric contact lens prescription.

        The sphere meridian and the sphere+cylinder meridian are vertex
        compensated independently; the new cylinder is their difference.

        Returns:
            {"SPH", "CY", "ADD", "AX", "Exact SPH", "Exact CY", "BV"}, or None
            when the input is not numeric or a meridian power is undefined.
        """
        rx = self._parse(data, "convert_to_toric")
        if rx is None:
            return None

        sphere_power = self.vertex_compensate(rx.sph, rx.bv_mm)
        cylinder_meridian = self.vertex_compensate(rx.sph + rx.cyl, rx.bv_mm)
        if not (math.isfinite(sphere_power) and math.isfinite(cylinder_meridian)):
            log.warning("Vertex compensation undefined for %.2f/%.2f D at %.1f mm", rx.sph, rx.cyl, rx.bv_mm,
                        extra={"operation": "convert_to_toric"})
            return None
        cylinder_power = cylinder_meridian - sphere_power

        nearest_sphere = round_to_nearest_quarter(sphere_power)
        nearest_cylinder = round_to_nearest_quarter(cylinder_power)
        log.debug("Meridians %.4f/%.4f D -> %.2f/%.2f D", sphere_power, cylinder_meridian,
                  nearest_sphere, nearest_cylinder, extra={"operation": "convert_to_toric"})

        value: Dict[str, Any] = format_result_to_quarter({
            "SPH": nearest_sphere,
            "CY": nearest_cylinder,
            "ADD": rx.add,
        })
        value["AX"] = str(int(round_half_away(rx.axis)))
        value["Exact SPH"] = format_power(sphere_power)
        value["Exact CY"] = format_power(cylinder_power)
        value["BV"] = rx.bv_mm
        return value

    def convert(self, data: Mapping[str, Any], lens_type: str = "spheric") -> Optional[Dict[str, Any]]:
        """Convert with the named lens type ("spheric" or "toric")."""
        converters = {
            "spheric": self.convert_to_spheric,
            "toric": self.convert_to_toric,
        }
        if lens_type not in converters:
            raise ValueError(f"Unknown lens type {lens_type!r}; expected one of {sorted(LENS_TYPES)}")
        return converters[lens_type](data)
