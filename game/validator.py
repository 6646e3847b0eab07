"""Answer validation with "did you mean?" fuzzy matching.

Everything here is a pure function of its arguments. The matcher runs in
stages and stops at the first one that produces a result:

1. duplicate check against names already accepted this round
2. exact, case-insensitive match
3. substring containment (either direction) with a minimum overlap
4. Levenshtein distance, restricted to candidates sharing a 2-char prefix
   or suffix with the input
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence


MIN_SUBSTRING_LENGTH = 5
SUBSTRING_RATIO = 0.7
DISTANCE_RATIO = 0.3


class MatchKind(Enum):
    """Outcome categories of a validation."""
    EXACT = "exact"
    SUGGESTION = "suggestion"
    NO_MATCH = "no_match"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating one answer."""
    kind: MatchKind
    canonical: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.kind == MatchKind.EXACT

    @property
    def needs_confirmation(self) -> bool:
        return self.kind == MatchKind.SUGGESTION

    @property
    def rejected(self) -> bool:
        return self.kind in (MatchKind.NO_MATCH, MatchKind.DUPLICATE)


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance (insert, delete, substitute all cost 1)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(a) + 1))
    for j in range(1, len(b) + 1):
        current = [j] + [0] * len(a)
        for i in range(1, len(a) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            current[i] = min(
                current[i - 1] + 1,
                previous[i] + 1,
                previous[i - 1] + cost,
            )
        previous = current

    return previous[len(a)]


def _substring_matches(lower_input: str, candidates: Sequence[str]) -> List[str]:
    min_length = max(MIN_SUBSTRING_LENGTH, int(len(lower_input) * SUBSTRING_RATIO))
    matches = []
    for candidate in candidates:
        lower_candidate = candidate.lower()
        if lower_input in lower_candidate and len(lower_input) >= min_length:
            matches.append(candidate)
        elif lower_candidate in lower_input and len(lower_candidate) >= min_length:
            matches.append(candidate)
    return matches


def find_close_match(text: str, candidates: Sequence[str]) -> Optional[str]:
    """Return the best near-miss candidate for text, or None.

    Stage A prefers substring containment, picking the candidate whose length
    is closest to the input. Stage B falls back to edit distance with a
    threshold of 30% of the longer string.
    """
    if not text or len(text) < 2:
        return None

    lower_input = text.lower()

    substring_matches = _substring_matches(lower_input, candidates)
    if substring_matches:
        # sorted() is stable, so ties keep candidate order
        substring_matches = sorted(
            substring_matches, key=lambda c: abs(len(c) - len(text))
        )
        return substring_matches[0]

    best_match = None
    best_distance = float("inf")

    for candidate in candidates:
        lower_candidate = candidate.lower()
        if (lower_candidate[:2] != lower_input[:2]
                and lower_candidate[-2:] != lower_input[-2:]):
            continue

        distance = levenshtein_distance(lower_input, lower_candidate)
        threshold = max(len(lower_input), len(lower_candidate)) * DISTANCE_RATIO
        if distance < threshold and distance < best_distance:
            best_match = candidate
            best_distance = distance

    return best_match


def validate(text: str, candidates: Sequence[str],
             already_named: Iterable[str] = ()) -> ValidationResult:
    """Validate a free-text answer against the candidate list.

    Args:
        text: Raw player input (surrounding whitespace is ignored)
        candidates: Valid answers, in prominence order
        already_named: Names accepted earlier this round

    Returns:
        ValidationResult. For EXACT and SUGGESTION, canonical holds the
        candidate with its original casing.
    """
    answer = text.strip()
    lower_answer = answer.lower()

    named_lower = {name.lower() for name in already_named}
    if lower_answer in named_lower:
        return ValidationResult(MatchKind.DUPLICATE)

    for candidate in candidates:
        if candidate.lower() == lower_answer:
            return ValidationResult(MatchKind.EXACT, candidate)

    # Never suggest something that can no longer be accepted
    open_candidates = [c for c in candidates if c.lower() not in named_lower]
    suggestion = find_close_match(answer, open_candidates)
    if suggestion is not None:
        return ValidationResult(MatchKind.SUGGESTION, suggestion)

    return ValidationResult(MatchKind.NO_MATCH)
