"""Guess budgets and round scoring.

Both functions are pure so they can be reasoned about (and tested) without a
running round. The formula has to stay as it is for scores to remain
comparable with highscores recorded in earlier sessions.
"""

BASE_SCORE = 1000
GUESS_BONUS = 200
TIME_BONUS = 10
PLAYER_BONUS = 100


def max_guesses_per_player(player_count: int) -> int:
    if player_count <= 1:
        return 6
    if player_count == 2:
        return 3
    return 2


def calculate_score(
    guess_number: int,
    time_used: int,
    correct: bool,
    player_count: int,
    round_duration: int = 60,
) -> int:
    """Score a single guess.

    Incorrect guesses are worth nothing. A correct guess earns the base score
    plus bonuses for guessing early (``guess_number``), quickly (``time_used``
    seconds into the round) and, with more than one player, a per-capita bonus.
    """
    if not correct:
        return 0

    score = BASE_SCORE
    score += max(0, (max_guesses_per_player(player_count) - guess_number + 1) * GUESS_BONUS)
    score += max(0, (round_duration - time_used) * TIME_BONUS)
    if player_count > 1:
        score += player_count * PLAYER_BONUS
    return round(score)
