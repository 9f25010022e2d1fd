import pytest

from assessments.recommendation import APPROVE, REJECT, REVIEW, recommend


@pytest.mark.parametrize("score, action, reason", [
    (100, APPROVE, "excellent performance"),
    (82, APPROVE, "excellent performance"),
    (80, APPROVE, "excellent performance"),
    (70, APPROVE, "satisfactory performance"),
    (65, REVIEW, "borderline - requires review"),
    (60, REVIEW, "borderline - requires review"),
    (59.9, REJECT, "below passing threshold"),
    (50, REJECT, "below passing threshold"),
])
def test_default_threshold(score, action, reason):
    assert recommend(score, 70) == (action, reason)


def test_excellent_regardless_of_threshold():
    assert recommend(85, 90) == (APPROVE, "excellent performance")
    assert recommend(80, 95) == (APPROVE, "excellent performance")


def test_high_threshold_borderline_below_80():
    assert recommend(79, 85) == (REVIEW, "borderline - requires review")


def test_low_threshold_keeps_excellent_at_80():
    assert recommend(75, 50).reason == "satisfactory performance"
