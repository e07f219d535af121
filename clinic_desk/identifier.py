"""CPF (11-digit patient identifier) validation, Modulo-11 with two check digits."""
from __future__ import annotations
import logging
import re
from typing import Container

from .errors import Reason
from .models import ACCEPTED, Verdict

logger = logging.getLogger(__name__)

CPF_LENGTH = 11
_DIGITS = re.compile(r"[0-9]{%d}" % CPF_LENGTH)


def check_digit(candidate: str, position: int) -> int:
    """Expected value of the check digit at ``position`` (9 or 10)."""
    total = sum(int(candidate[i]) * (position + 1 - i) for i in range(position))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_identifier(candidate: str, existing_ids: Container[str] = ()) -> Verdict:
    if candidate in existing_ids:
        return _reject(candidate, Reason.DUPLICATE)
    if not _DIGITS.fullmatch(candidate):
        return _reject(candidate, Reason.BAD_LENGTH)
    if len(set(candidate)) == 1:
        return _reject(candidate, Reason.BLACKLISTED)
    for position in (9, 10):
        if check_digit(candidate, position) != int(candidate[position]):
            return _reject(candidate, Reason.BAD_CHECKSUM)
    return ACCEPTED


def _reject(candidate: str, reason: Reason) -> Verdict:
    logger.debug("identifier %r rejected: %s", candidate, reason.value)
    return Verdict.reject(reason)
