import pytest

from registry_lock.core.tokens import BASE58_ALPHABET, Base58StringGenerator


def test_base58_generator_uses_requested_length_and_alphabet() -> None:
    generator = Base58StringGenerator()

    code = generator.create_string(32)

    assert len(code) == 32
    assert set(code) <= set(BASE58_ALPHABET)
    assert not set(code) & set("0OIl")


def test_base58_generator_produces_distinct_codes() -> None:
    generator = Base58StringGenerator()

    codes = {generator.create_string(32) for _ in range(50)}

    assert len(codes) == 50


def test_base58_generator_rejects_non_positive_length() -> None:
    with pytest.raises(ValueError):
        Base58StringGenerator().create_string(0)
