import pytest

from homerunn.exceptions import MalformedSignature
from homerunn.models import SLOTS, Signature, ordinal_distance


def test_zero_signature_is_valid_in_every_slot():
    zero = Signature.zero()
    assert str(zero) == "0" * 15
    assert len(zero) == 15


def test_parse_accepts_letters_only_in_price_slot():
    assert Signature.parse("L00000000000000")[0] == "L"

    with pytest.raises(MalformedSignature) as exc:
        Signature.parse("0A0000000000000")
    assert exc.value.slot == 1


@pytest.mark.parametrize(
    "value",
    ["", "00000000000000", "0000000000000000", "M00000000000000", "00000000000000x"],
)
def test_parse_rejects_wrong_length_or_symbol(value):
    with pytest.raises(MalformedSignature):
        Signature.parse(value)


def test_parse_rejects_non_string():
    with pytest.raises(MalformedSignature):
        Signature.parse(123456789012345)


def test_malformed_signature_is_a_value_error():
    with pytest.raises(ValueError):
        Signature.parse("short")


def test_parse_returns_same_instance_for_signature():
    sig = Signature("322412231010230")
    assert Signature.parse(sig) is sig


def test_ordinal_distance_treats_nine_and_a_as_adjacent():
    assert ordinal_distance("9", "A") == 1
    assert ordinal_distance("1", "L") == 20
    assert ordinal_distance("4", "4") == 0


def test_slot_weights_sum_to_one_hundred():
    assert sum(slot.weight for slot in SLOTS) == 100
    assert len(SLOTS) == 15
