"""Swirdle rules: letter scoring, share grid, word fallback and streaks."""

from __future__ import annotations

import hashlib
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Sequence, TypeVar

MAX_GUESSES = 6
WIN_POINTS = 15
HINT_COST = 5

CORRECT = "correct"
PRESENT = "present"
ABSENT = "absent"

_SQUARES = {CORRECT: "\U0001F7E9", PRESENT: "\U0001F7E8", ABSENT: "⬛"}

T = TypeVar("T")


def compute_statuses(answer: str, guess: str) -> list[str]:
    """Per-letter result for ``guess`` against ``answer``.

    Exact matches are marked first. Remaining letters are ``present`` only
    while unmatched copies of that letter are left in the answer, so a
    doubled letter in the guess is not credited twice.
    """
    answer = answer.upper()
    guess = guess.upper()
    statuses = [ABSENT] * len(guess)
    remaining: Counter[str] = Counter()

    for i, (a, g) in enumerate(zip(answer, guess)):
        if a == g:
            statuses[i] = CORRECT
        else:
            remaining[a] += 1

    for i, g in enumerate(guess):
        if statuses[i] == CORRECT:
            continue
        if remaining[g] > 0:
            statuses[i] = PRESENT
            remaining[g] -= 1

    return statuses


def is_win(statuses: Sequence[str]) -> bool:
    return bool(statuses) and all(s == CORRECT for s in statuses)


def share_grid(answer: str, guesses: Sequence[str]) -> str:
    return "\n".join(
        "".join(_SQUARES[s] for s in compute_statuses(answer, g)) for g in guesses
    )


def share_text(answer: str, guesses: Sequence[str], won: bool, for_date: date) -> str:
    score = f"{len(guesses)}/{MAX_GUESSES}" if won else f"X/{MAX_GUESSES}"
    return f"Swirdle {for_date.isoformat()} {score}\n\n{share_grid(answer, guesses)}"


def pick_word_for_date(words: Sequence[T], for_date: date) -> T | None:
    """Stable pick from ``words`` for a day with nothing scheduled."""
    if not words:
        return None
    digest = hashlib.sha256(for_date.isoformat().encode()).hexdigest()
    return words[int(digest, 16) % len(words)]


@dataclass(frozen=True)
class Stats:
    games_played: int = 0
    wins: int = 0
    current_streak: int = 0
    max_streak: int = 0
    last_played: date | None = None


def next_stats(prev: Stats, won: bool, today: date) -> Stats:
    """Stats after finishing today's game.

    A win extends the streak only if the previous game was yesterday.
    A loss resets it to zero.
    """
    if won:
        streak = prev.current_streak + 1 if prev.last_played == today - timedelta(days=1) else 1
    else:
        streak = 0
    return Stats(
        games_played=prev.games_played + 1,
        wins=prev.wins + (1 if won else 0),
        current_streak=streak,
        max_streak=max(prev.max_streak, streak),
        last_played=today,
    )
