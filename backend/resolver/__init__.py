"""Match linker: cascade that maps an external fixture onto a canonical Match.

Read-only; uses repositories only. Every outcome (linked strategy or
unlinked) is logged so unresolved team-name patterns can feed the alias table.
"""

from .diagnostics import frequent_unmatched_names, nearest_matches, nearest_team_names
from .match_linker import MatchLinker, date_tolerant_confidence, fuzzy_confidence
from .types import (
    STRATEGY_ALIASED,
    STRATEGY_DATE_TOLERANT,
    STRATEGY_EXACT,
    STRATEGY_FUZZY,
    STRATEGY_ORDER,
    UNLINKED,
    MatchLinkResult,
)

__all__ = [
    "MatchLinker",
    "MatchLinkResult",
    "STRATEGY_ALIASED",
    "STRATEGY_DATE_TOLERANT",
    "STRATEGY_EXACT",
    "STRATEGY_FUZZY",
    "STRATEGY_ORDER",
    "UNLINKED",
    "date_tolerant_confidence",
    "frequent_unmatched_names",
    "fuzzy_confidence",
    "nearest_matches",
    "nearest_team_names",
]
