# src/p2pex/__init__.py
"""
p2pex - P2P Exchanger Rate Calculator

Derives buy/sell USDT quote rates for a currency pair from a reference
market rate and a stored spread, keeps the give / receive / USDT amounts
consistent while the operator edits any of them, and holds back dangerously
large spreads behind an explicit acknowledgment. Operated through a
Telegram chat.
"""

__version__ = "1.0.0"
