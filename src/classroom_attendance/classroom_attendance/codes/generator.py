"""Secure generator for attendance poll codes.

Codes are 8 decimal digits, zero-padded, drawn uniformly from [0, 10**8)
with `secrets.randbelow` so there is no modulo bias.
"""
from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.constants import CODE_LENGTH, CODE_SPACE, MAX_CODE_ATTEMPTS

_CODE_RE = re.compile(rf"[0-9]{{{CODE_LENGTH}}}")


@dataclass(frozen=True)
class GenerationResult:
    code: Optional[str]
    attempts: int

    @property
    def ok(self) -> bool:
        return self.code is not None


def validate_format(code: object) -> bool:
    """True iff `code` is a string of exactly 8 ASCII digits."""
    return isinstance(code, str) and _CODE_RE.fullmatch(code) is not None


class CodeGenerator:
    def __init__(
        self,
        *,
        max_attempts: int = MAX_CODE_ATTEMPTS,
        randbelow: Callable[[int], int] = secrets.randbelow,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be positive")
        self._max_attempts = int(max_attempts)
        self._randbelow = randbelow

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def new_code(self) -> str:
        return str(self._randbelow(CODE_SPACE)).zfill(CODE_LENGTH)

    def generate(self, is_unique: Callable[[str], bool]) -> GenerationResult:
        rejected: set[str] = set()
        for attempt in range(1, self._max_attempts + 1):
            code = self.new_code()
            # A code the predicate already turned down counts as a failed attempt.
            if code in rejected:
                continue
            if is_unique(code):
                return GenerationResult(code=code, attempts=attempt)
            rejected.add(code)
        return GenerationResult(code=None, attempts=self._max_attempts)

    validate_format = staticmethod(validate_format)
