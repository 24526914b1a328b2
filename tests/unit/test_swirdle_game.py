"""Unit tests for Swirdle scoring, sharing and streaks."""

from datetime import date

from decanted.swirdle.game import (
    ABSENT,
    CORRECT,
    MAX_GUESSES,
    PRESENT,
    Stats,
    compute_statuses,
    is_win,
    next_stats,
    pick_word_for_date,
    share_text,
)


class TestComputeStatuses:
    def test_exact_match(self):
        assert compute_statuses("MERLOT", "merlot") == [CORRECT] * 6

    def test_present_and_absent(self):
        assert compute_statuses("CRANE", "NACRE") == [PRESENT, PRESENT, PRESENT, PRESENT, CORRECT]

    def test_doubled_letter_not_credited_twice(self):
        # One L and one A in the answer: only the first of each is credited.
        assert compute_statuses("SALON", "LLAMA") == [PRESENT, ABSENT, PRESENT, ABSENT, ABSENT]

    def test_all_absent(self):
        assert compute_statuses("ROSE", "DUCK") == [ABSENT] * 4

    def test_is_win(self):
        assert is_win([CORRECT, CORRECT])
        assert not is_win([CORRECT, PRESENT])
        assert not is_win([])


class TestShareText:
    def test_win_header(self):
        text = share_text("ROSE", ["RISK", "ROSE"], won=True, for_date=date(2026, 5, 1))
        assert text.startswith(f"Swirdle 2026-05-01 2/{MAX_GUESSES}")
        assert len(text.split("\n\n")[1].splitlines()) == 2

    def test_loss_header(self):
        text = share_text("ROSE", ["DUCK"] * MAX_GUESSES, won=False, for_date=date(2026, 5, 1))
        assert f"X/{MAX_GUESSES}" in text


class TestPickWordForDate:
    def test_empty_pool(self):
        assert pick_word_for_date([], date(2026, 1, 1)) is None

    def test_stable_for_same_day(self):
        words = ["ROSE", "BRUT", "OAKY", "TANNIN"]
        day = date(2026, 1, 1)
        assert pick_word_for_date(words, day) == pick_word_for_date(words, day)
        assert pick_word_for_date(words, day) in words


class TestNextStats:
    def test_first_win(self):
        stats = next_stats(Stats(), won=True, today=date(2026, 1, 2))
        assert stats == Stats(1, 1, 1, 1, date(2026, 1, 2))

    def test_consecutive_win_extends_streak(self):
        prev = Stats(3, 3, 3, 3, date(2026, 1, 1))
        stats = next_stats(prev, won=True, today=date(2026, 1, 2))
        assert stats.current_streak == 4
        assert stats.max_streak == 4

    def test_gap_restarts_streak(self):
        prev = Stats(3, 3, 3, 3, date(2026, 1, 1))
        stats = next_stats(prev, won=True, today=date(2026, 1, 5))
        assert stats.current_streak == 1
        assert stats.max_streak == 3

    def test_loss_resets_streak(self):
        prev = Stats(3, 3, 3, 3, date(2026, 1, 1))
        stats = next_stats(prev, won=False, today=date(2026, 1, 2))
        assert stats.current_streak == 0
        assert stats.wins == 3
        assert stats.games_played == 4
