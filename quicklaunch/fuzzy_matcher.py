"""Fuzzy subsequence matching for application names."""

from typing import List, Optional

SCORE_MATCH = 20
GAP_START = -3
GAP_EXTENSION = -1

# Bonus by the role a matched character plays in the name
BONUS_HEAD = SCORE_MATCH // 2                    # first character of a word
BONUS_BREAK = SCORE_MATCH // 2 + GAP_EXTENSION   # after a delimiter such as "-" or "."
BONUS_CAMEL = SCORE_MATCH // 2 + 2 * GAP_EXTENSION
BONUS_CONSECUTIVE = -(GAP_START + GAP_EXTENSION)
BONUS_FIRST_CHAR_MULTIPLIER = 2

DELIMITERS = set("-_./\\:,;|()[]{}+")

_WHITE, _DELIMITER, _LOWER, _UPPER, _NUMBER, _OTHER = range(6)


def _char_class(char: str) -> int:
    if char.isspace():
        return _WHITE
    if char in DELIMITERS:
        return _DELIMITER
    if char.isupper():
        return _UPPER
    if char.islower():
        return _LOWER
    if char.isdigit():
        return _NUMBER
    return _OTHER


def _bonus(prev_class: Optional[int], cur_class: int) -> int:
    if cur_class in (_WHITE, _DELIMITER):
        return 0
    if prev_class is None or prev_class == _WHITE:
        return BONUS_HEAD
    if prev_class == _DELIMITER:
        return BONUS_BREAK
    if prev_class == _LOWER and cur_class == _UPPER:
        return BONUS_CAMEL
    if (prev_class == _NUMBER) != (cur_class == _NUMBER):
        return BONUS_CAMEL
    return 0


def char_bonuses(text: str) -> List[int]:
    """
    Positional bonus of every character of ``text``.

    Args:
        text: Candidate string

    Returns:
        List of bonuses, one per character
    """
    bonuses = []
    prev_class = None
    for char in text:
        cur_class = _char_class(char)
        bonuses.append(_bonus(prev_class, cur_class))
        prev_class = cur_class
    return bonuses


def fuzzy_score(choice: str, query: str) -> Optional[int]:
    """
    Score ``choice`` against ``query`` as an ordered subsequence match.

    Matching is case-insensitive unless the query contains an upper case
    letter. Every matched character earns SCORE_MATCH plus a bonus for word
    starts, delimiters, camelCase humps and consecutive runs; gaps between
    matched characters are penalized. The best alignment is found by dynamic
    programming over query and choice positions.

    Args:
        choice: Text to search in (e.g. an application name)
        query: User input

    Returns:
        Score (higher is better), or None if ``query`` is empty or not a subsequence of ``choice``
    """
    if not query or not choice:
        return None

    case_sensitive = any(char.isupper() for char in query)
    text = choice if case_sensitive else choice.lower()
    pattern = query if case_sensitive else query.lower()
    if len(pattern) > len(text):
        return None

    bonuses = char_bonuses(choice)
    prev_row: List[Optional[int]] = [None] * len(text)

    for i, query_char in enumerate(pattern):
        row: List[Optional[int]] = [None] * len(text)
        # Best score of the previous query character matched at k <= j - 2,
        # including the penalty for the gap between k and j
        gap_carry: Optional[int] = None
        for j, text_char in enumerate(text):
            if i > 0 and j >= 2:
                opened = prev_row[j - 2] + GAP_START if prev_row[j - 2] is not None else None
                extended = gap_carry + GAP_EXTENSION if gap_carry is not None else None
                candidates = [value for value in (opened, extended) if value is not None]
                gap_carry = max(candidates) if candidates else None

            if text_char != query_char:
                continue

            if i == 0:
                row[j] = SCORE_MATCH + bonuses[j] * BONUS_FIRST_CHAR_MULTIPLIER
                continue

            best = None
            if j >= 1 and prev_row[j - 1] is not None:
                best = prev_row[j - 1] + SCORE_MATCH + max(bonuses[j], BONUS_CONSECUTIVE)
            if gap_carry is not None:
                gapped = gap_carry + SCORE_MATCH + bonuses[j]
                best = gapped if best is None else max(best, gapped)
            row[j] = best
        prev_row = row

    scores = [score for score in prev_row if score is not None]
    return max(scores) if scores else None
