"""Normalization helpers for names, phones and tags."""

from __future__ import annotations

import re

PHONE_DIGITS = 10

# NBSP, the U+2000 block of typographic spaces up to the zero-width space,
# narrow NBSP, medium mathematical space and the ideographic space.
_SPACE_LIKE = re.compile("[\u00a0\u2000-\u200b\u202f\u205f\u3000]")
_WHITESPACE_RUN = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"[^0-9]")


def normalize_name(raw: object) -> str:
    if not isinstance(raw, str):
        return ""
    value = _SPACE_LIKE.sub(" ", raw)
    return _WHITESPACE_RUN.sub(" ", value).strip()


def normalize_phone(raw: object) -> str:
    """
    Keep the trailing ten digits of the input.

    Returns "" when fewer than ten digits are present; callers treat the
    empty string as invalid. Country-code prefixes are dropped.
    """
    if isinstance(raw, bool):
        return ""
    if isinstance(raw, int):
        raw = str(raw)
    if not isinstance(raw, str):
        return ""
    digits = _NON_DIGIT.sub("", raw)
    if len(digits) < PHONE_DIGITS:
        return ""
    return digits[-PHONE_DIGITS:]


def normalize_tag(raw: object) -> str:
    if isinstance(raw, bool):
        return ""
    if isinstance(raw, (int, float)):
        raw = str(raw)
    if not isinstance(raw, str):
        return ""
    return raw.strip().lower()
