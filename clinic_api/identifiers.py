import re
import uuid

from bson import ObjectId

from clinic_api.errors import InvalidArgument

_TOKEN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def is_valid_id(value) -> bool:
    return isinstance(value, str) and bool(_TOKEN.match(value))


def require_id(value, field: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgument(f"{field} is required")
    value = str(value).strip()
    if not is_valid_id(value):
        raise InvalidArgument(f"Invalid {field}")
    return value


def id_variants(token: str) -> list:
    """Every stored form a reference to ``token`` may take."""
    variants = [token]
    if ObjectId.is_valid(token):
        variants.append(ObjectId(token))
    return variants


def match_id(token: str) -> dict:
    return {"$in": id_variants(token)}


def new_appointment_id() -> str:
    return f"apt{uuid.uuid4().hex[:12]}"
