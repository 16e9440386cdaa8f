from __future__ import annotations

import pytest

from ad_users.utils.dn import (
    location_from_dn,
    normalize_location,
    parse_location,
    rename_leaf,
    split_dn,
    upper_dc,
)


@pytest.mark.parametrize(
    ("location", "expected"),
    [
        (None, "CN=Users,"),
        ("", "CN=Users,"),
        ("   ", "CN=Users,"),
        ("OU=Sales", "OU=Sales,"),
        ("OU=Sales,", "OU=Sales,"),
        ("OU=Sales,OU=EMEA", "OU=Sales,OU=EMEA,"),
    ],
)
def test_normalize_location(location: str | None, expected: str) -> None:
    assert normalize_location(location) == expected


def test_location_from_dn() -> None:
    assert location_from_dn("CN=Jane,OU=Sales,OU=EMEA,DC=corp,DC=com") == "EMEA/Sales"
    assert location_from_dn("cn=Jane,ou=Sales,dc=corp,dc=com") == "Sales"
    assert location_from_dn("CN=Jane,CN=Users,DC=corp,DC=com") == "!Users"
    assert location_from_dn("CN=Jane,DC=corp,DC=com") == ""
    assert location_from_dn(r"CN=Doe\, Jane,OU=R\,D,DC=corp,DC=com") == "R,D"
    assert location_from_dn(r"CN=Jane,OU=Caf\C3\A9,DC=corp,DC=com") == "Café"


def test_parse_location() -> None:
    assert parse_location("EMEA/Sales") == "OU=Sales,OU=EMEA,"
    assert parse_location("/EMEA/Sales/") == "OU=Sales,OU=EMEA,"
    assert parse_location("!Users") == "CN=Users,"
    assert parse_location("OU=Sales,OU=EMEA") == "OU=Sales,OU=EMEA,"
    assert parse_location("") == "CN=Users,"
    assert parse_location("R,D") == r"OU=R\,D,"
    assert parse_location(r"R\D") == r"OU=R\\D,"


def test_parse_location_round_trip() -> None:
    dn = "CN=Jane,OU=Sales,OU=EMEA,DC=corp,DC=com"
    assert parse_location(location_from_dn(dn)) == "OU=Sales,OU=EMEA,"

    dn = r"CN=Jane,OU=R\,D,OU=A\\B,DC=corp,DC=com"
    assert location_from_dn(dn) == r"A\B/R,D"
    assert parse_location(location_from_dn(dn)) == r"OU=R\,D,OU=A\\B,"


def test_split_dn() -> None:
    assert split_dn("CN=Jane,OU=Sales,DC=corp") == ["CN=Jane", "OU=Sales", "DC=corp"]
    assert split_dn(r"CN=Doe\, Jane, OU=Sales") == [r"CN=Doe\, Jane", "OU=Sales"]
    assert split_dn("") == []


def test_upper_dc() -> None:
    assert upper_dc("dc=corp,Dc=example,DC=com") == "DC=corp,DC=example,DC=com"


def test_rename_leaf() -> None:
    assert rename_leaf("CN=Jane,OU=Sales,DC=corp", "Jane Doe") == "CN=Jane Doe,OU=Sales,DC=corp"
    assert rename_leaf("CN=Jane,OU=Sales,DC=corp", "Doe, Jane") == r"CN=Doe\, Jane,OU=Sales,DC=corp"
