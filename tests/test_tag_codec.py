from __future__ import annotations

import pytest

from core.errors import StoreError
from core.tag_codec import decode_entry, encode_entry


def test_refs_with_separators_and_quotes_survive() -> None:
    refs = ["CAACAgIAAx,0BAAE", 'quote"inside', "ünïcødé", "back\\slash"]
    assert decode_entry(encode_entry(refs)) == refs


def test_encoding_is_a_json_array() -> None:
    assert encode_entry(["a", "b"]) == b'["a","b"]'


def test_empty_entry_decodes_to_empty_list() -> None:
    assert decode_entry(encode_entry([])) == []


@pytest.mark.parametrize(
    "payload",
    [b"a,b,c", b'{"a": 1}', b"[1, 2]", b"\xff\xfe"],
)
def test_corrupt_payload_raises_store_error(payload: bytes) -> None:
    with pytest.raises(StoreError):
        decode_entry(payload)
