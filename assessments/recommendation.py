from collections import namedtuple

Recommendation = namedtuple('Recommendation', 'action reason')

APPROVE = 'approve'
REVIEW = 'review'
REJECT = 'reject'

EXCELLENT_SCORE = 80
BORDERLINE_MARGIN = 10


def recommend(final_score, passing_percentage):
    """
    Advisory decision for a finished test. The approval workflow may
    override it.
    """
    if final_score >= EXCELLENT_SCORE:
        return Recommendation(APPROVE, "excellent performance")
    if final_score >= passing_percentage:
        return Recommendation(APPROVE, "satisfactory performance")
    if final_score >= passing_percentage - BORDERLINE_MARGIN:
        return Recommendation(REVIEW, "borderline - requires review")
    return Recommendation(REJECT, "below passing threshold")


def recommend_for_session(session):
    if not session.is_submitted or session.final_score is None:
        return None
    return recommend(session.final_score, session.policy.passing_percentage)
