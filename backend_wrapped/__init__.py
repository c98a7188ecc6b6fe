"""
Backend Wrapped: yearly on-chain activity report ("Wrapped") for Sui addresses.

Fetches an address's transaction history for one calendar year, classifies
every transaction by protocol and category, and derives activity metrics,
gas savings, NFT holdings and a persona label. Modular architecture with
clear separation between ledger client, analytics, cache and API server.
"""

__version__ = "0.1.0"
