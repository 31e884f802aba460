"""
Combat services for the shot counter combat engine.

This module contains the shot ledger, the wound and status router, and the
services that apply combat actions, chase actions, boosts and up-checks to a
fight, plus the fight manager that owns the encounter lifecycle.
"""

from .boost import BoostRequest, BoostService
from .chase import ChaseService, ChaseUpdate, merge_chase_values
from .combat_action import CombatActionProcessor, CombatUpdate
from .fight_manager import FightManager
from .shot_ledger import ShotLedger
from .up_check import (
    UpCheckRequest,
    UpCheckService,
    UpCheckState,
    resolve_status,
    up_check_state,
)
from .wound_router import (
    STRATEGIES,
    ThresholdOutcome,
    WoundRouting,
    WoundStatusRouter,
    WoundStrategy,
)

__all__ = [
    # Import from boost.py
    "BoostRequest",
    "BoostService",
    # Import from chase.py
    "ChaseService",
    "ChaseUpdate",
    "merge_chase_values",
    # Import from combat_action.py
    "CombatActionProcessor",
    "CombatUpdate",
    # Import from fight_manager.py
    "FightManager",
    # Import from shot_ledger.py
    "ShotLedger",
    # Import from up_check.py
    "UpCheckRequest",
    "UpCheckService",
    "UpCheckState",
    "resolve_status",
    "up_check_state",
    # Import from wound_router.py
    "STRATEGIES",
    "ThresholdOutcome",
    "WoundRouting",
    "WoundStatusRouter",
    "WoundStrategy",
]
