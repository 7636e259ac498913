"""
Extracción de campos de una respuesta de Google Geocoding.

Cada campo se extrae de forma independiente: si falta una parte de la
respuesta el campo vale None y el resto sigue extrayéndose.

Estructura esperada:
    {"results": [{"address_components": [{"long_name", "types": [...]}],
                  "formatted_address": str,
                  "geometry": {"location": {"lat": float, "lng": float}}}]}
"""

import re
from enum import Enum
from typing import Iterable, Optional, Union

FieldValue = Optional[Union[str, float]]


class GeocodeField(str, Enum):
    STREET_NUMBER = "street_number"
    ROUTE = "route"
    POSTAL_CODE = "postal_code"
    SUBLOCALITY = "sublocality"
    LOCALITY = "locality"
    FORMATTED_ADDRESS = "formatted_address"
    LATITUDE = "latitude"
    LONGITUDE = "longitude"


# Patrón sobre cada tag de `types`. "locality" no debe matchear "sublocality".
COMPONENT_PATTERNS = {
    GeocodeField.STREET_NUMBER: re.compile(r"\bstreet_number\b"),
    GeocodeField.ROUTE: re.compile(r"\broute\b"),
    GeocodeField.POSTAL_CODE: re.compile(r"\bpostal_code\b"),
    GeocodeField.SUBLOCALITY: re.compile(r"\bsublocality\b"),
    GeocodeField.LOCALITY: re.compile(r"\blocality\b"),
}

COORDINATE_KEYS = {
    GeocodeField.LATITUDE: "lat",
    GeocodeField.LONGITUDE: "lng",
}


def _results(payload: Optional[dict]) -> list:
    if not isinstance(payload, dict):
        return []
    results = payload.get("results")
    if not isinstance(results, list):
        return []
    return [r for r in results if isinstance(r, dict)]


def _component(results: list, pattern: re.Pattern) -> Optional[str]:
    if not results:
        return None
    components = results[0].get("address_components")
    if not isinstance(components, list):
        return None

    for component in components:
        if not isinstance(component, dict):
            continue
        types = component.get("types")
        if not isinstance(types, list):
            continue
        if any(isinstance(t, str) and pattern.search(t) for t in types):
            name = component.get("long_name")
            return name if isinstance(name, str) and name else None
    return None


def _coordinate(results: list, key: str) -> Optional[float]:
    """Promedio de la coordenada sobre todos los resultados candidatos."""
    values = []
    for result in results:
        geometry = result.get("geometry")
        location = geometry.get("location") if isinstance(geometry, dict) else None
        value = location.get(key) if isinstance(location, dict) else None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            values.append(float(value))
    if not values:
        return None
    return sum(values) / len(values)


def parse_geocode_field(payload: Optional[dict], field: Union[GeocodeField, str]) -> FieldValue:
    """
    Extrae un campo de una respuesta de geocodificación.

    Args:
        payload: Respuesta cruda (None si la consulta falló)
        field: Campo a extraer

    Returns:
        El valor, o None si no está presente
    """
    field = GeocodeField(field)
    results = _results(payload)

    if field in COMPONENT_PATTERNS:
        return _component(results, COMPONENT_PATTERNS[field])

    if field is GeocodeField.FORMATTED_ADDRESS:
        if not results:
            return None
        value = results[0].get("formatted_address")
        return value if isinstance(value, str) and value else None

    return _coordinate(results, COORDINATE_KEYS[field])


def parse_geocode_fields(
    payload: Optional[dict], fields: Iterable[Union[GeocodeField, str]]
) -> dict[str, FieldValue]:
    """Extrae varios campos: {nombre_campo: valor}."""
    parsed = {}
    for field in fields:
        field = GeocodeField(field)
        parsed[field.value] = parse_geocode_field(payload, field)
    return parsed
