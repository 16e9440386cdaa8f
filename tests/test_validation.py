from __future__ import annotations

import pytest

from ad_users.utils.validation import is_blank, is_correct_email


@pytest.mark.parametrize(
    "email", ["a@b.co", "a.b@c-d.com", "first_last@mail.corp.example.org"]
)
def test_valid_email(email: str) -> None:
    assert is_correct_email(email)


@pytest.mark.parametrize(
    "email",
    [None, "", "   ", "a@b", "plainaddress", "a@b.c", "a b@c.com", "a@b.toolong", "a@b.co\n"],
)
def test_invalid_email(email: str | None) -> None:
    assert not is_correct_email(email)


def test_is_blank() -> None:
    assert is_blank(None)
    assert is_blank(" \t")
    assert not is_blank("x")
