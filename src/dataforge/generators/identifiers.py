"""Identifier generators with check characters.

Each checksummed generator accepts ``valid`` (default True). With
``valid=False`` it returns a value of the same shape whose check
character(s) are deliberately wrong, for negative testing.
"""

import string
import uuid
from typing import ClassVar, Tuple

from dataforge.context import GenerationContext
from dataforge.generator import DataGenerator

ALPHANUMERIC = string.digits + string.ascii_uppercase


def _char_value(char: str) -> int:
    """Digits map to 0-9, letters A-Z to 10-35."""
    return ALPHANUMERIC.index(char.upper())


class OrganizationCodeGenerator(DataGenerator[str]):
    """Organization codes per GB 11714-1997, e.g. ``D2673041-X``."""

    name = "org_code"
    supported_parameters = ("valid",)
    shared = True

    WEIGHTS: ClassVar[Tuple[int, ...]] = (3, 7, 9, 10, 5, 8, 4, 2)
    CHECK_CHARS = "0123456789X"

    def generate(self, context: GenerationContext) -> str:
        valid = self._param(context, "valid", True, bool)
        rng = self._rng(context)

        body = "".join(rng.choice(ALPHANUMERIC) for _ in range(8))
        check = self.check_char(body)
        if not valid:
            check = rng.choice([c for c in self.CHECK_CHARS if c != check])
        return f"{body}-{check}"

    @classmethod
    def check_char(cls, body: str) -> str:
        total = sum(_char_value(c) * w for c, w in zip(body, cls.WEIGHTS))
        check_value = 11 - total % 11
        if check_value == 10:
            return "X"
        if check_value == 11:
            return "0"
        return str(check_value)


class LeiCodeGenerator(DataGenerator[str]):
    """Legal Entity Identifiers per ISO 17442.

    20 characters: 4-digit LOU prefix, ``00``, 12 entity characters and two
    mod-97 check digits.
    """

    name = "lei"
    supported_parameters = ("valid",)
    shared = True

    def generate(self, context: GenerationContext) -> str:
        valid = self._param(context, "valid", True, bool)
        rng = self._rng(context)

        partial = (
            "".join(rng.choice(string.digits) for _ in range(4))
            + "00"
            + "".join(rng.choice(ALPHANUMERIC) for _ in range(12))
        )
        lei = partial + self.check_digits(partial)
        if not valid:
            lei = lei[:-1] + str((int(lei[-1]) + 1) % 10)
        return lei

    @staticmethod
    def check_digits(partial: str) -> str:
        remainder = int(to_numeric(partial + "00")) % 97
        return f"{98 - remainder:02d}"

    @staticmethod
    def is_valid(lei: str) -> bool:
        if len(lei) != 20 or any(c not in ALPHANUMERIC for c in lei.upper()):
            return False
        return int(to_numeric(lei)) % 97 == 1


class UuidGenerator(DataGenerator[str]):
    """Random version 4 UUIDs."""

    name = "uuid"
    supported_parameters = ("uppercase", "hyphens")
    shared = True

    def generate(self, context: GenerationContext) -> str:
        uppercase = self._param(context, "uppercase", False, bool)
        hyphens = self._param(context, "hyphens", True, bool)

        value = uuid.UUID(int=self._rng(context).getrandbits(128), version=4)
        text = str(value) if hyphens else value.hex
        return text.upper() if uppercase else text


def to_numeric(value: str) -> str:
    """Expand letters to their two-digit values (A=10 ... Z=35)."""
    return "".join(str(_char_value(c)) for c in value)
