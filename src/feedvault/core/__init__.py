"""核心业务逻辑."""

from feedvault.core.accounts import AccountStore
from feedvault.core.counters import MessageCounter, MessageCounts
from feedvault.core.identity import (
    AmbiguousMatchError,
    ExistingRecord,
    IdentityResolver,
    IdentityStrategy,
)
from feedvault.core.merge import MergeAction, MergeDecision, decide
from feedvault.core.messages import MessageStore
from feedvault.core.reconciler import BatchResult, MessageReconciler, RowFailure

__all__ = [
    "AccountStore",
    "AmbiguousMatchError",
    "BatchResult",
    "ExistingRecord",
    "IdentityResolver",
    "IdentityStrategy",
    "MergeAction",
    "MergeDecision",
    "MessageCounter",
    "MessageCounts",
    "MessageReconciler",
    "MessageStore",
    "RowFailure",
    "decide",
]
