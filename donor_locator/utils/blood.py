import re

BLOOD_GROUPS: tuple[str, ...] = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")

# Spelled-out Rh suffixes → sign
_RH_SUFFIXES: list[tuple[str, str]] = [
    ("POSITIVE", "+"),
    ("NEGATIVE", "-"),
    ("+VE", "+"),
    ("-VE", "-"),
    ("POS", "+"),
    ("NEG", "-"),
]


def normalize_blood_group(raw: str | None) -> str | None:
    """Return the canonical blood group for *raw*, or ``None`` if unrecognized.

    Matching is case-insensitive and ignores whitespace, so ``"ab +"``,
    ``"O neg"`` and ``"a-ve"`` all resolve.
    """
    if not raw or not isinstance(raw, str):
        return None

    cleaned = re.sub(r"\s+", "", raw.upper())
    for suffix, sign in _RH_SUFFIXES:
        if cleaned.endswith(suffix):
            cleaned = cleaned[: -len(suffix)] + sign
            break

    if cleaned in BLOOD_GROUPS:
        return cleaned
    return None
