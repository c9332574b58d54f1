"""
Motor de match.

Codifica listings en firmas, aprende el gusto del usuario a partir de
swipes y ordena el feed según la cercanía entre firmas.
"""

from homerunn.matching.encoder import describe_signature, encode
from homerunn.matching.scoring import match_score, signature_similarity
from homerunn.matching.learner import apply_feedback
from homerunn.matching.ranking import RankOptions, prune_expired_dislikes, rank
from homerunn.matching.engine import MatchingEngine, MatchResult

__all__ = [
    "encode",
    "describe_signature",
    "signature_similarity",
    "match_score",
    "apply_feedback",
    "rank",
    "RankOptions",
    "prune_expired_dislikes",
    "MatchingEngine",
    "MatchResult",
]
