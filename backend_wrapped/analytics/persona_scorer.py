"""
Persona scoring: pick one label that summarises an address's year.

Each candidate rule either abstains or emits (persona, score, reasoning).
The strictly highest score wins; on an exact tie the earlier-declared rule wins.
No eligible rule -> balanced_builder with fixed confidence 0.5.
Confidence is the winning score / 100, clamped to [0, 0.95].
Thresholds live in PersonaThresholds so they can be tuned without touching the rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from backend_wrapped.analytics.models import ActivityAggregate, PersonaResult
from backend_wrapped.analytics.registry import CATEGORY_LENDING, CATEGORY_LST, CATEGORY_NFT
from backend_wrapped.wrapped_logging import get_logger

logger = get_logger(__name__)

PERSONA_MOVE_MAXIMALIST = "move_maximalist"
PERSONA_DIAMOND_HAND = "diamond_hand"
PERSONA_YIELD_ARCHITECT = "yield_architect"
PERSONA_JPEG_MOGUL = "jpeg_mogul"
PERSONA_EARLY_BIRD = "early_bird"
PERSONA_BALANCED_BUILDER = "balanced_builder"

MAX_CONFIDENCE = 0.95
DEFAULT_CONFIDENCE = 0.5
DEFAULT_REASONING = "Well-rounded Sui ecosystem participant"

PERSONA_COPY: dict[str, tuple[str, str, str]] = {
    PERSONA_MOVE_MAXIMALIST: (
        "The Move Maximalist",
        "You live and breathe Sui. High transaction volume across multiple protocols "
        "makes you a true power user of the Move ecosystem.",
        "⚡",
    ),
    PERSONA_DIAMOND_HAND: (
        "The Diamond Hand",
        "HODL is your middle name. You've accumulated SUI and LSTs while barely "
        "touching the sell button. Conviction personified.",
        "\U0001f48e",
    ),
    PERSONA_YIELD_ARCHITECT: (
        "The Yield Architect",
        "Efficiency is your game. You've spent most of your time optimizing yields "
        "across lending pools and liquidity positions.",
        "\U0001f3d7️",
    ),
    PERSONA_JPEG_MOGUL: (
        "The JPEG Mogul",
        "Digital art and collectibles are your domain. Your Kiosk is a gallery, and "
        "you're not afraid to support creators with royalties.",
        "\U0001f5bc️",
    ),
    PERSONA_EARLY_BIRD: (
        "The Early Bird",
        "You saw the potential early. Joining Sui in its first months puts you among "
        "the OG believers of the ecosystem.",
        "\U0001f426",
    ),
    PERSONA_BALANCED_BUILDER: (
        "The Balanced Builder",
        "Jack of all trades, master of exploration. You've dipped your toes across "
        "the ecosystem without overcommitting to one area.",
        "\U0001f528",
    ),
}


@dataclass(frozen=True)
class PersonaThresholds:
    early_bird_max_days: int = 90
    maximalist_min_transactions: int = 100
    maximalist_min_protocols: int = 3
    yield_min_share: float = 40.0
    nft_min_share: float = 30.0
    diamond_hand_min_active_days: int = 180


DEFAULT_THRESHOLDS = PersonaThresholds()


@dataclass(frozen=True)
class PersonaStats:
    """Inputs the rules look at. Category shares are percentages (0-100)."""

    total_transactions: int
    unique_protocols: int
    days_after_mainnet: int
    active_days: int
    category_shares: dict[str, float] = field(default_factory=dict)

    def share(self, category: str) -> float:
        return self.category_shares.get(category, 0.0)

    @classmethod
    def from_activity(cls, activity: ActivityAggregate) -> "PersonaStats":
        return cls(
            total_transactions=activity.total_transactions,
            unique_protocols=len(activity.unique_protocols),
            days_after_mainnet=activity.raw_days_after_mainnet,
            active_days=activity.active_days,
            category_shares={c: agg.percentage for c, agg in activity.category_breakdown.items()},
        )


@dataclass(frozen=True)
class Candidate:
    persona: str
    score: float
    reasoning: str


Rule = Callable[[PersonaStats, PersonaThresholds], "Candidate | None"]


def _early_bird(stats: PersonaStats, t: PersonaThresholds) -> Candidate | None:
    if stats.days_after_mainnet > t.early_bird_max_days:
        return None
    return Candidate(
        PERSONA_EARLY_BIRD,
        100 - stats.days_after_mainnet,
        f"Joined {stats.days_after_mainnet} days after mainnet launch",
    )


def _move_maximalist(stats: PersonaStats, t: PersonaThresholds) -> Candidate | None:
    if stats.total_transactions <= t.maximalist_min_transactions:
        return None
    if stats.unique_protocols <= t.maximalist_min_protocols:
        return None
    return Candidate(
        PERSONA_MOVE_MAXIMALIST,
        stats.total_transactions / 10 + stats.unique_protocols * 5,
        f"{stats.total_transactions} transactions across {stats.unique_protocols} protocols",
    )


def _yield_architect(stats: PersonaStats, t: PersonaThresholds) -> Candidate | None:
    share = stats.share(CATEGORY_LENDING) + stats.share(CATEGORY_LST)
    if share <= t.yield_min_share:
        return None
    return Candidate(
        PERSONA_YIELD_ARCHITECT,
        share * 1.5,
        f"{share:.0f}% of activity in yield protocols",
    )


def _jpeg_mogul(stats: PersonaStats, t: PersonaThresholds) -> Candidate | None:
    share = stats.share(CATEGORY_NFT)
    if share <= t.nft_min_share:
        return None
    return Candidate(PERSONA_JPEG_MOGUL, share * 2, f"{share:.0f}% NFT activity")


def _diamond_hand(stats: PersonaStats, t: PersonaThresholds) -> Candidate | None:
    if stats.active_days <= t.diamond_hand_min_active_days:
        return None
    return Candidate(
        PERSONA_DIAMOND_HAND,
        stats.active_days / 3,
        f"Active for {stats.active_days} days",
    )


# Declaration order is the tie-break order.
RULES: tuple[Rule, ...] = (
    _early_bird,
    _move_maximalist,
    _yield_architect,
    _jpeg_mogul,
    _diamond_hand,
)


def make_persona_result(persona: str, confidence: float, reasoning: str) -> PersonaResult:
    title, description, emoji = PERSONA_COPY[persona]
    return PersonaResult(
        persona=persona,
        confidence=confidence,
        reasoning=reasoning,
        title=title,
        description=description,
        emoji=emoji,
    )


def score_persona(
    stats: PersonaStats,
    thresholds: PersonaThresholds = DEFAULT_THRESHOLDS,
) -> PersonaResult:
    """Evaluate every rule and keep only the top candidate."""
    winner: Candidate | None = None
    for rule in RULES:
        candidate = rule(stats, thresholds)
        if candidate is None:
            continue
        if winner is None or candidate.score > winner.score:
            winner = candidate

    if winner is None:
        result = make_persona_result(PERSONA_BALANCED_BUILDER, DEFAULT_CONFIDENCE, DEFAULT_REASONING)
    else:
        confidence = min(max(winner.score / 100, 0.0), MAX_CONFIDENCE)
        result = make_persona_result(winner.persona, confidence, winner.reasoning)
    logger.debug(
        "persona_scorer_result",
        persona=result.persona,
        confidence=result.confidence,
    )
    return result
