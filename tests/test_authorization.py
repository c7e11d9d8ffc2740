from __future__ import annotations

from adapters.authorization import AllowList, parse_user_ids


def test_parse_user_ids_skips_invalid_entries() -> None:
    assert parse_user_ids("1, 2,abc,,3") == frozenset({1, 2, 3})


def test_empty_list_authorizes_everyone() -> None:
    allow_list = AllowList.from_env_value(None)
    assert not allow_list.restricted
    assert allow_list.is_authorized(123)


def test_listed_users_only() -> None:
    allow_list = AllowList.from_env_value("10,20")
    assert allow_list.restricted
    assert allow_list.is_authorized(10)
    assert not allow_list.is_authorized(30)
    assert not allow_list.is_authorized(None)
