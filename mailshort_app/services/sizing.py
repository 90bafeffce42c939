"""
Size classification for email bodies.

Gmail clips messages above roughly 102 KB of HTML. The hard threshold marks
documents that will be clipped; the soft one is an early warning. The same
thresholds apply to rewrite output and to raw content checked before a
rewrite.
"""

from enum import Enum

SOFT_SIZE_THRESHOLD = 102 * 1024  # 104448 bytes
HARD_SIZE_THRESHOLD = 200 * 1024  # 204800 bytes


class SizeClass(str, Enum):
    """Deliverability signal derived from byte length"""
    OK = "ok"
    SOFT = "soft"
    HARD = "hard"


SIZE_MESSAGES = {
    SizeClass.HARD: "Gmail will clip (≥200 KB)",
    SizeClass.SOFT: "Heads up: email is getting large (≥102 KB)",
    SizeClass.OK: "Looks good",
}


def classify_size(
    byte_length: int,
    soft_threshold: int = SOFT_SIZE_THRESHOLD,
    hard_threshold: int = HARD_SIZE_THRESHOLD,
) -> SizeClass:
    if byte_length >= hard_threshold:
        return SizeClass.HARD
    if byte_length >= soft_threshold:
        return SizeClass.SOFT
    return SizeClass.OK


def encoded_length(text: str) -> int:
    """UTF-8 byte length of *text*"""
    return len(text.encode("utf-8"))
