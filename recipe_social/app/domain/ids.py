# recipe_social/app/domain/ids.py
import re
import secrets

_OBJECT_ID_RE = re.compile(r"[0-9a-fA-F]{24}")


def new_object_id() -> str:
    """Gera um id de 24 caracteres hexadecimais (12 bytes aleatórios)."""
    return secrets.token_hex(12)


def is_valid_object_id(value: object) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_RE.fullmatch(value))
