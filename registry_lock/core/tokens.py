import secrets
from typing import Protocol

# Bitcoin base58: no 0, O, I or l.
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


class StringGenerator(Protocol):
    def create_string(self, length: int) -> str: ...


class Base58StringGenerator:
    def __init__(self, alphabet: str = BASE58_ALPHABET) -> None:
        self.alphabet = alphabet

    def create_string(self, length: int) -> str:
        if length <= 0:
            raise ValueError(f"length must be positive, got {length}")
        return "".join(secrets.choice(self.alphabet) for _ in range(length))
