"""
utils/payload_utils.py

Purpose: Tolerant extraction from NUFI payloads

NUFI has moved fields around between API revisions ("data" vs "datos",
"UUID" vs "uuid" vs "id", several base64 field names). Every lookup here is
an ordered list of candidate paths; the first path holding a non-empty value
wins.
"""

from typing import Any, Dict, Optional, Sequence, Tuple

Path = Tuple[str, ...]

CONTAINERS: Tuple[Path, ...] = (("data",), ("datos",), ())

REQUEST_ID_FIELDS = ("UUID", "uuid", "id")

DOCUMENT_FIELDS = (
    "base64_semanas_cotizadas_nss",
    "base64_historial_laboral",
    "base64_pdf",
    "base64",
)

REQUEST_ID_PATHS: Tuple[Path, ...] = tuple(
    container + (field,) for container in CONTAINERS for field in REQUEST_ID_FIELDS
)

DOCUMENT_PATHS: Tuple[Path, ...] = tuple(
    container + (field,) for container in CONTAINERS for field in DOCUMENT_FIELDS
)

# A real PDF is far longer; shorter strings are placeholders
MIN_DOCUMENT_LENGTH = 200


def get_path(payload: Any, path: Sequence[str]) -> Any:
    """Walks nested dicts; returns None as soon as a step is missing."""
    current = payload
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def first_match(payload: Any, paths: Sequence[Sequence[str]]) -> Any:
    """
    Returns the value at the first path that holds a truthy value.

    Args:
        payload: Decoded JSON body
        paths: Candidate paths, highest priority first

    Returns:
        The matched value or None
    """
    for path in paths:
        value = get_path(payload, path)
        if value:
            return value
    return None


def extract_request_id(payload: Any) -> Optional[str]:
    """NUFI correlation UUID, as a string."""
    value = first_match(payload, REQUEST_ID_PATHS)
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def find_base64_document(payload: Any) -> Optional[str]:
    """
    Embedded base64 PDF, if one of the known fields carries a plausible one.
    """
    value = first_match(payload, DOCUMENT_PATHS)
    if isinstance(value, str) and len(value) > MIN_DOCUMENT_LENGTH:
        return value
    return None


def pick_result_data(payload: Any) -> Any:
    """The part of the callback that holds the labor history."""
    for container in CONTAINERS[:-1]:
        value = get_path(payload, container)
        if value:
            return value
    return payload


def first_value(data: Any, paths: Sequence[Sequence[str]], default: Any = "N/D") -> Any:
    """
    Like first_match, but keeps falsy values such as 0 and only skips
    missing (None) ones. Used for report figures.
    """
    for path in paths:
        value = get_path(data, path)
        if value is not None:
            return value
    return default


def employment_records(data: Any) -> list:
    records = get_path(data, ("empleos",))
    return records if isinstance(records, list) else []


def summarize_result(data: Any) -> Dict[str, Any]:
    """
    Pulls the fields shown in the fallback report out of the result data.
    OCR'd values ("ocr.datos.*", "ocr.*") take precedence over top-level ones.
    """
    def ocr_paths(field: str) -> Tuple[Path, ...]:
        return (("ocr", "datos", field), ("ocr", field), (field,))

    return {
        "nombre": first_value(data, ocr_paths("nombre")),
        "curp": first_value(data, ocr_paths("curp")),
        "nss": first_value(data, ocr_paths("nss")),
        "fecha_emision": first_value(data, (("ocr", "datos", "fecha_emision"), ("fecha_emision",)), None),
        "semanas_cotizadas": first_value(data, (("ocr", "datos", "semanas_cotizadas"), ("semanas_cotizadas",))),
        "semanas_descontadas": first_value(data, (("ocr", "datos", "semanas_descontadas"), ("semanas_descontadas",))),
        "semanas_reintegradas": first_value(data, (("ocr", "datos", "semanas_reintegradas"), ("semanas_reintegradas",))),
        "empleos": employment_records(data),
    }
