"""Helpers to read JSON bodies and form posts the same way."""
from typing import Optional

from flask import request

from rab_maker.exceptions import BusinessLogicError
from rab_maker.utils.number_format import parse_id_number


def get_payload() -> dict:
    """JSON body when present, form data otherwise."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def get_str(data: dict, key: str, default: str = '') -> str:
    value = data.get(key, default)
    if value is None:
        return default
    return str(value).strip()


def get_number(data: dict, key: str, label: str, required: bool = True) -> Optional[float]:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise BusinessLogicError(f'{label} wajib diisi')
        return None
    try:
        return parse_id_number(value)
    except ValueError as e:
        raise BusinessLogicError(f'{label}: {e}')


def get_id(data: dict, key: str, label: str, required: bool = True) -> Optional[int]:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise BusinessLogicError(f'{label} wajib diisi')
        return None
    if isinstance(value, bool):
        raise BusinessLogicError(f'{label} tidak valid')
    if isinstance(value, float):
        if not value.is_integer():
            raise BusinessLogicError(f'{label} harus bilangan bulat')
        return int(value)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise BusinessLogicError(f'{label} tidak valid')
