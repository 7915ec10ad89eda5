"""
Cluster Utilities

Primitives untuk koordinasi pool of worker processes:
- Topology discovery (worker mana berada di host mana)
- Namespace broadcaster (bind value ke namespace worker)
- Message Dictionary dengan swap/collect exchange protocol
"""

__version__ = "1.0.0"
