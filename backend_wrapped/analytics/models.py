"""
Data models for Wrapped analytics output.

Responsibilities:
- Define the per-protocol / per-category rollups, gas comparison, domain
  metric blocks, NFT holdings, persona result and the composite WrappedAggregate.
- All are derived structures, rebuilt on every pipeline run and never mutated
  after assembly. WrappedAggregate.to_dict() is the JSON contract at the API boundary.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class ProtocolAggregate:
    protocol: str
    display_name: str
    category: str
    transaction_count: int = 0
    command_count: int = 0
    gas_spent_mist: int = 0
    volume_usd: float = 0.0
    percentage: float = 0.0


@dataclass
class CategoryAggregate:
    category: str
    transaction_count: int = 0
    command_count: int = 0
    gas_spent_mist: int = 0
    volume_usd: float = 0.0
    percentage: float = 0.0


@dataclass(frozen=True)
class GasComparison:
    """
    Actual gas spent vs. what the same actions would have cost on the reference chain.

    total_gas_spent_mist is the exact signed sum; USD values use illustrative price constants.
    """

    total_gas_spent_mist: int
    total_gas_usd: float
    hypothetical_alt_chain_gas_units: int
    hypothetical_alt_chain_gas_usd: float
    savings_usd: float
    savings_multiple: float


@dataclass
class TradingMetrics:
    swap_count: int = 0
    total_volume_usd: float = 0.0
    maker_volume_usd: float = 0.0
    taker_volume_usd: float = 0.0
    best_trade_percent_gain: float = 0.0
    best_trade_date: str | None = None
    best_trade_protocol: str | None = None


@dataclass
class LendingMetrics:
    protocols_used: list[str] = field(default_factory=list)
    lend_count: int = 0
    borrow_count: int = 0
    repay_count: int = 0
    total_supplied_usd: float = 0.0
    total_borrowed_usd: float = 0.0
    min_health_factor: float = 999.0
    liquidations: int = 0
    close_calls: int = 0
    health_factor_resilience_score: float = 100.0


@dataclass
class LstPosition:
    token: str
    display_name: str
    amount: float = 0.0
    percentage: float = 0.0


@dataclass
class StakingMetrics:
    lst_portfolio: list[LstPosition] = field(default_factory=list)
    stake_count: int = 0
    unstake_count: int = 0
    total_staked_sui: float = 0.0
    total_rewards_earned: float = 0.0
    longest_stake_days: int = 0
    is_still_holding: bool = False


@dataclass
class NftMetrics:
    total_bought: int = 0
    total_sold: int = 0
    collections_interacted: int = 0
    volume_usd: float = 0.0
    royalties_paid_usd: float = 0.0
    creator_support_score: float = 0.0


@dataclass(frozen=True)
class Percentiles:
    transactions: float
    protocols: float
    volume: float
    active_days: float


@dataclass
class NftHolding:
    collection: str
    display_name: str
    count: int = 0
    is_bluechip: bool = False
    image_url: str | None = None


@dataclass
class NftHoldings:
    holdings: list[NftHolding] = field(default_factory=list)
    total_count: int = 0
    bluechip_count: int = 0


@dataclass(frozen=True)
class PersonaResult:
    persona: str
    confidence: float
    reasoning: str
    title: str = ""
    description: str = ""
    emoji: str = ""


@dataclass
class ActivityAggregate:
    """Aggregator output: everything in the report except NFT holdings and persona."""

    first_transaction_timestamp: int
    first_transaction_digest: str
    first_transaction_action: str
    first_transaction_protocol: str
    days_after_mainnet_launch: int
    earlier_than_percentage: float
    total_transactions: int
    total_commands: int
    active_days: int
    unique_protocols: list[str]
    gas_savings: GasComparison
    protocol_breakdown: list[ProtocolAggregate]
    category_breakdown: dict[str, CategoryAggregate]
    action_counts: dict[str, int]
    trading_metrics: TradingMetrics
    lending_metrics: LendingMetrics
    staking_metrics: StakingMetrics
    nft_metrics: NftMetrics
    percentiles: Percentiles
    indexer_checkpoint: int
    # Signed, unclamped; days_after_mainnet_launch is the display value.
    raw_days_after_mainnet: int = 0

    def category_percentage(self, category: str) -> float:
        agg = self.category_breakdown.get(category)
        return agg.percentage if agg else 0.0


@dataclass
class WrappedAggregate:
    """The pipeline's output: cached as a unit and serialised at the API boundary."""

    address: str
    year: int
    activity: ActivityAggregate
    nft_holdings: NftHoldings
    persona: PersonaResult
    generated_at: int

    def to_dict(self) -> dict[str, Any]:
        """Flat JSON-serialisable dict; exact MIST totals are emitted as strings."""
        activity = asdict(self.activity)
        activity.pop("raw_days_after_mainnet", None)
        gas = activity["gas_savings"]
        gas["total_gas_spent_mist"] = str(gas["total_gas_spent_mist"])
        for row in activity["protocol_breakdown"]:
            row["gas_spent_mist"] = str(row["gas_spent_mist"])
        for row in activity["category_breakdown"].values():
            row["gas_spent_mist"] = str(row["gas_spent_mist"])
        persona = asdict(self.persona)
        out: dict[str, Any] = {"address": self.address, "year": self.year}
        out.update(activity)
        out["nft_holdings"] = asdict(self.nft_holdings)
        out["persona"] = persona.pop("persona")
        out["persona_confidence"] = persona.pop("confidence")
        out["persona_reasoning"] = persona.pop("reasoning")
        out["persona_copy"] = persona
        out["generated_at"] = self.generated_at
        return out
