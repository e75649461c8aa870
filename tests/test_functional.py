import pytest

from envelopes.functional import Left, Right


def test_right_carries_value():
    result = Right({"amountCents": 300})
    assert result.is_right()
    assert not result.is_left()
    assert result.get_or_else({}) == {"amountCents": 300}


def test_left_falls_back_to_default():
    result = Left(["is required"])
    assert result.is_left()
    assert result.get_or_else({}) == {}
    assert result.get_error() == ["is required"]


def test_right_has_no_error():
    with pytest.raises(ValueError):
        Right(1).get_error()


def test_equality_distinguishes_sides():
    assert Right(1) != Left(1)
    assert Left([1]) == Left([1])
