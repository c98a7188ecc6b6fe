"""
Aggregator: reduce one year of classified transactions to Wrapped activity metrics.

Input is the window's transactions sorted ascending by timestamp (the caller
filters and sorts; nothing is re-filtered here). One classification pass feeds
per-protocol and per-category counters; percentages are computed after the pass.
Gas is summed as exact signed integers (MIST) and only clamped at USD conversion.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from backend_wrapped.analytics.models import (
    ActivityAggregate,
    CategoryAggregate,
    GasComparison,
    LendingMetrics,
    LstPosition,
    NftMetrics,
    Percentiles,
    ProtocolAggregate,
    StakingMetrics,
    TradingMetrics,
)
from backend_wrapped.analytics.protocol_classifier import (
    Classification,
    classify_transaction,
)
from backend_wrapped.analytics.registry import (
    CATEGORIES,
    CATEGORY_DEX,
    CATEGORY_LENDING,
    CATEGORY_LST,
    CATEGORY_NFT,
    ProtocolRegistry,
    get_registry,
)
from backend_wrapped.core.exceptions import NoTransactionsError
from backend_wrapped.ledger.models import TransactionRecord
from backend_wrapped.wrapped_logging import get_logger

logger = get_logger(__name__)

MIST_PER_SUI = 1_000_000_000
WEI_PER_GWEI = 1_000_000_000
DAY_MS = 24 * 60 * 60 * 1000

# Sui mainnet launch, 2023-05-03T00:00:00Z
MAINNET_LAUNCH_MS = int(datetime(2023, 5, 3, tzinfo=timezone.utc).timestamp() * 1000)
# earlier_than_percentage reaches 0 this many days after launch
EARLIER_THAN_HORIZON_DAYS = 600

# Reference-chain gas units per (action, category); then per category; then a plain transfer.
ALT_CHAIN_GAS_UNITS: dict[tuple[str, str], int] = {
    ("swap", CATEGORY_DEX): 184_523,
    ("add_liquidity", CATEGORY_DEX): 350_000,
    ("remove_liquidity", CATEGORY_DEX): 250_000,
    ("lend", CATEGORY_LENDING): 250_000,
    ("borrow", CATEGORY_LENDING): 350_000,
    ("repay", CATEGORY_LENDING): 200_000,
    ("withdraw", CATEGORY_LENDING): 200_000,
    ("stake", CATEGORY_LST): 150_000,
    ("unstake", CATEGORY_LST): 150_000,
    ("nft_buy", CATEGORY_NFT): 200_000,
    ("nft_sell", CATEGORY_NFT): 150_000,
}
ALT_CHAIN_CATEGORY_GAS_UNITS: dict[str, int] = {
    CATEGORY_DEX: 150_000,
    CATEGORY_LENDING: 200_000,
    CATEGORY_LST: 150_000,
    CATEGORY_NFT: 150_000,
}
ALT_CHAIN_TRANSFER_GAS_UNITS = 21_000


@dataclass(frozen=True)
class GasPrices:
    """Illustrative price constants; not an oracle."""

    native_usd: float = 3.5
    alt_chain_gas_price_gwei: float = 30.0
    alt_chain_native_usd: float = 2500.0


DEFAULT_GAS_PRICES = GasPrices()


# -----------------------------------------------------------------------------
# Gas
# -----------------------------------------------------------------------------


def compute_total_gas_mist(transactions: Iterable[TransactionRecord]) -> int:
    """Exact signed sum of computation + storage - rebate. Never clamped."""
    return sum((tx.net_gas_mist for tx in transactions), 0)


def alt_chain_gas_units(classification: Classification) -> int:
    units = ALT_CHAIN_GAS_UNITS.get((classification.action, classification.category))
    if units is not None:
        return units
    return ALT_CHAIN_CATEGORY_GAS_UNITS.get(classification.category, ALT_CHAIN_TRANSFER_GAS_UNITS)


def mist_to_usd(mist: int, native_usd: float) -> float:
    """Convert MIST to USD; negative totals (net rebate) convert as 0."""
    mist = max(mist, 0)
    return float(Decimal(mist) / Decimal(MIST_PER_SUI) * Decimal(str(native_usd)))


def alt_chain_units_to_usd(units: int, prices: GasPrices) -> float:
    eth = Decimal(units) * Decimal(str(prices.alt_chain_gas_price_gwei)) / Decimal(WEI_PER_GWEI)
    return float(eth * Decimal(str(prices.alt_chain_native_usd)))


def compute_gas_comparison(
    total_gas_mist: int,
    alt_units: int,
    prices: GasPrices = DEFAULT_GAS_PRICES,
) -> GasComparison:
    actual_usd = mist_to_usd(total_gas_mist, prices.native_usd)
    hypothetical_usd = alt_chain_units_to_usd(alt_units, prices)
    return GasComparison(
        total_gas_spent_mist=total_gas_mist,
        total_gas_usd=actual_usd,
        hypothetical_alt_chain_gas_units=alt_units,
        hypothetical_alt_chain_gas_usd=hypothetical_usd,
        savings_usd=hypothetical_usd - actual_usd,
        savings_multiple=hypothetical_usd / max(actual_usd, 0.01),
    )


# -----------------------------------------------------------------------------
# Activity
# -----------------------------------------------------------------------------


def utc_date(timestamp_ms: int):
    return datetime.fromtimestamp(timestamp_ms // 1000, tz=timezone.utc).date()


def count_active_days(transactions: Iterable[TransactionRecord]) -> int:
    """Distinct UTC calendar dates with at least one transaction."""
    return len({utc_date(tx.timestamp_ms) for tx in transactions})


def days_after_mainnet(timestamp_ms: int) -> int:
    """Whole days from mainnet launch to timestamp (floored; negative before launch)."""
    return (timestamp_ms - MAINNET_LAUNCH_MS) // DAY_MS


def compute_percentiles(total_transactions: int, unique_protocols: int, active_days: int) -> Percentiles:
    """Heuristic percentile estimates; no population data is consulted."""
    return Percentiles(
        transactions=min(99.0, total_transactions / 10),
        protocols=min(99.0, unique_protocols * 8.0),
        volume=50.0,
        active_days=min(99.0, active_days / 3),
    )


def _percentage(count: int, total: int) -> float:
    return count / total * 100 if total > 0 else 0.0


def aggregate_transactions(
    transactions: Sequence[TransactionRecord],
    lifetime_first: TransactionRecord | None = None,
    registry: ProtocolRegistry | None = None,
    prices: GasPrices = DEFAULT_GAS_PRICES,
) -> ActivityAggregate:
    """
    Build activity metrics for one window.

    transactions: window transactions, ascending by timestamp. Empty raises NoTransactionsError.
    lifetime_first: the address's first-ever transaction (may predate the window);
        drives join date and days-after-launch. Falls back to the window's first.
    """
    if not transactions:
        raise NoTransactionsError("No transactions found in the reporting window")
    registry = registry or get_registry()
    total = len(transactions)

    protocol_stats: dict[str, ProtocolAggregate] = {}
    category_stats = {c: CategoryAggregate(category=c) for c in CATEGORIES}
    action_counts: Counter[tuple[str, str]] = Counter()
    total_commands = 0
    alt_units = 0
    first_classification: Classification | None = None

    for tx in transactions:
        classification = classify_transaction(tx, registry)
        if first_classification is None:
            first_classification = classification
        commands = tx.command_count
        total_commands += commands
        alt_units += alt_chain_gas_units(classification)
        action_counts[(classification.category, classification.action)] += 1

        cat = category_stats[classification.category]
        cat.transaction_count += 1
        cat.command_count += commands
        cat.gas_spent_mist += tx.net_gas_mist

        if not classification.is_known:
            continue
        proto = protocol_stats.get(classification.protocol)
        if proto is None:
            proto = ProtocolAggregate(
                protocol=classification.protocol,
                display_name=registry.display_name(classification.protocol),
                category=classification.category,
            )
            protocol_stats[classification.protocol] = proto
        proto.transaction_count += 1
        proto.command_count += commands
        proto.gas_spent_mist += tx.net_gas_mist

    for proto in protocol_stats.values():
        proto.percentage = _percentage(proto.transaction_count, total)
    for cat in category_stats.values():
        cat.percentage = _percentage(cat.transaction_count, total)

    protocol_breakdown = sorted(
        protocol_stats.values(),
        key=lambda p: (-p.transaction_count, p.protocol),
    )
    unique_protocols = [p.protocol for p in protocol_breakdown]
    active_days = count_active_days(transactions)

    window_first = transactions[0]
    arrival = lifetime_first or window_first
    raw_days = days_after_mainnet(arrival.timestamp_ms)

    gas = compute_gas_comparison(compute_total_gas_mist(transactions), alt_units, prices)

    swap_count = action_counts[(CATEGORY_DEX, "swap")]
    if swap_count == 0:
        swap_count = category_stats[CATEGORY_DEX].transaction_count

    result = ActivityAggregate(
        first_transaction_timestamp=arrival.timestamp_ms,
        first_transaction_digest=arrival.digest,
        first_transaction_action=window_first.calls[0].function if window_first.calls else "Transaction",
        first_transaction_protocol=first_classification.protocol,
        days_after_mainnet_launch=max(raw_days, 0),
        earlier_than_percentage=min(100.0, max(0.0, 100 - raw_days / EARLIER_THAN_HORIZON_DAYS * 100)),
        total_transactions=total,
        total_commands=total_commands,
        active_days=active_days,
        unique_protocols=unique_protocols,
        gas_savings=gas,
        protocol_breakdown=protocol_breakdown,
        category_breakdown=category_stats,
        action_counts=_flatten_action_counts(action_counts),
        trading_metrics=TradingMetrics(swap_count=swap_count),
        lending_metrics=LendingMetrics(
            protocols_used=[p.display_name for p in protocol_breakdown if p.category == CATEGORY_LENDING],
            lend_count=action_counts[(CATEGORY_LENDING, "lend")],
            borrow_count=action_counts[(CATEGORY_LENDING, "borrow")],
            repay_count=action_counts[(CATEGORY_LENDING, "repay")],
        ),
        staking_metrics=StakingMetrics(
            lst_portfolio=[
                LstPosition(token=p.protocol, display_name=p.display_name, percentage=p.percentage)
                for p in protocol_breakdown
                if p.category == CATEGORY_LST
            ],
            stake_count=action_counts[(CATEGORY_LST, "stake")],
            unstake_count=action_counts[(CATEGORY_LST, "unstake")],
        ),
        nft_metrics=NftMetrics(
            total_bought=action_counts[(CATEGORY_NFT, "nft_buy")],
            total_sold=action_counts[(CATEGORY_NFT, "nft_sell")],
        ),
        percentiles=compute_percentiles(total, len(unique_protocols), active_days),
        indexer_checkpoint=max(tx.checkpoint for tx in transactions),
        raw_days_after_mainnet=raw_days,
    )
    logger.debug(
        "aggregator_result",
        total_transactions=total,
        unique_protocols=len(unique_protocols),
        active_days=active_days,
        total_gas_mist=str(gas.total_gas_spent_mist),
    )
    return result


def _flatten_action_counts(counts: Counter[tuple[str, str]]) -> dict[str, int]:
    """Sum per-(category, action) counters by action, sorted by action name."""
    out: Counter[str] = Counter()
    for (_, action), n in counts.items():
        out[action] += n
    return dict(sorted(out.items()))
