from __future__ import annotations

import re

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9_\-.]+@[a-zA-Z0-9_\-.]+\.[a-zA-Z]{2,5}$")


def is_blank(value: object) -> bool:
    return value is None or not str(value).strip()


def is_correct_email(email: str | None) -> bool:
    if is_blank(email):
        return False
    return bool(_EMAIL_RE.fullmatch(str(email)))
