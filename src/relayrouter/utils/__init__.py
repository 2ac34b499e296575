"""Helpers shared by the services layer.

Attributes:
    gather: Concurrent fan-out with partial failure
        ([collect_with_partial_failure][relayrouter.utils.gather.collect_with_partial_failure])
        and order-preserving flattening.

Note:
    The utils layer has **zero** imports from ``relayrouter.core`` or
    ``relayrouter.services``.
"""

from .gather import LookupOutcome, collect_with_partial_failure, flatten_unique, gather_outcomes


__all__ = [
    "LookupOutcome",
    "collect_with_partial_failure",
    "flatten_unique",
    "gather_outcomes",
]
