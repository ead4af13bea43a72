"""Unit tests for shared.password_strength."""

import pytest

from shared.password_strength import evaluate_password, strength_label

UPPER = "Include at least one uppercase letter"
LOWER = "Include at least one lowercase letter"
NUMBER = "Include at least one number"
SPECIAL = "Include at least one special character"
LENGTH = "Password must be at least 8 characters long"


def test_strong_password():
    result = evaluate_password("Passw0rd!")
    assert result.score == 5
    assert result.feedback == []
    assert result.is_valid is True
    assert result.label == "Strong"


def test_lowercase_only():
    result = evaluate_password("password")
    assert result.score == 2
    assert result.feedback == [UPPER, NUMBER, SPECIAL]
    assert result.is_valid is False


def test_short_password_is_invalid_even_with_four_classes():
    # Scores 4 on character classes but fails the length rule
    result = evaluate_password("Pa1!")
    assert result.score == 4
    assert result.feedback == [LENGTH]
    assert result.is_valid is False


def test_four_of_five_is_valid():
    result = evaluate_password("Password1")
    assert result.score == 4
    assert result.feedback == [SPECIAL]
    assert result.is_valid is True


@pytest.mark.parametrize("password", ["", None], ids=["empty", "none"])
def test_empty_password(password):
    result = evaluate_password(password)
    assert result.score == 0
    assert result.feedback == [LENGTH, UPPER, LOWER, NUMBER, SPECIAL]
    assert result.is_valid is False


@pytest.mark.parametrize("special", list("!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"))
def test_every_special_character_counts(special):
    assert SPECIAL not in evaluate_password(f"Abcdefg1{special}").feedback


def test_unlisted_symbol_does_not_count():
    assert SPECIAL in evaluate_password("Abcdefg1~").feedback


@pytest.mark.parametrize(
    "score, label",
    [(0, "Very Weak"), (1, "Very Weak"), (2, "Weak"), (3, "Fair"), (4, "Good"), (5, "Strong")],
)
def test_strength_label(score, label):
    assert strength_label(score) == label
