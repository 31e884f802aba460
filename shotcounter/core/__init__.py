"""
Core system module for the shot counter combat engine.

This module contains the fundamental pieces shared by every service,
including constants, rules configuration, the error taxonomy and logging.
"""

from .config import DEFAULT_RULES, BoostValues, CombatRules, load_rules
from .constants import (
    BoostType,
    CharacterType,
    ChasePosition,
    ChaseRole,
    EffectSeverity,
    EventType,
    Status,
)
from .error_handling import (
    CombatError,
    ErrorKind,
    InsufficientResourceError,
    NotFoundError,
    PersistenceFailureError,
    TenancyViolationError,
    ValidationFailureError,
)

__all__ = [
    # Import from config.py
    "DEFAULT_RULES",
    "BoostValues",
    "CombatRules",
    "load_rules",
    # Import from constants.py
    "BoostType",
    "CharacterType",
    "ChasePosition",
    "ChaseRole",
    "EffectSeverity",
    "EventType",
    "Status",
    # Import from error_handling.py
    "CombatError",
    "ErrorKind",
    "InsufficientResourceError",
    "NotFoundError",
    "PersistenceFailureError",
    "TenancyViolationError",
    "ValidationFailureError",
]
