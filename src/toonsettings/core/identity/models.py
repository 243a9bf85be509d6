"""Character identity models.

Usage:
    character = CharacterId(2112625428)
    str(character)  # "2112625428"
"""

from dataclasses import dataclass

MAX_CHARACTER_ID = 2**63
"""Exclusive upper bound for character identifiers (signed 64-bit range)."""


@dataclass(frozen=True, slots=True, order=True)
class CharacterId:
    """Numeric identifier of one in-game character.

    Compared and hashed by value. Valid range is [0, 2**63).
    """

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass; True is not an identifier
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"CharacterId value must be int, got {type(self.value).__name__}")
        if not 0 <= self.value < MAX_CHARACTER_ID:
            raise ValueError(f"CharacterId out of range: {self.value}")

    def __str__(self) -> str:
        return str(self.value)

    def __int__(self) -> int:
        return self.value
