"""
Wrapped analytics engine.

Turns one year of an address's Sui transactions into a WrappedAggregate.
Modules: protocol_classifier, aggregator, persona_scorer, nft_scanner, wrapped_pipeline.
"""

from backend_wrapped.analytics.protocol_classifier import classify_transaction
from backend_wrapped.analytics.aggregator import aggregate_transactions
from backend_wrapped.analytics.persona_scorer import score_persona
from backend_wrapped.analytics.nft_scanner import scan_nft_holdings
from backend_wrapped.analytics.wrapped_pipeline import generate_wrapped, get_wrapped

__all__ = [
    "classify_transaction",
    "aggregate_transactions",
    "score_persona",
    "scan_nft_holdings",
    "generate_wrapped",
    "get_wrapped",
]
