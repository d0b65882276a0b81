"""Game service module.

Provides:
- Game engine processing (engine/)
- Live session registry (registry.py)
- Durable game records (persistence.py)
"""

# Re-export for convenience
from .engine import MoveAction, ProcessResult, parse_move, process_move
from .persistence import GamePersistence, GameStore, get_game_persistence
from .registry import SessionRegistry, get_session_registry

__all__ = [
    # Engine
    "MoveAction",
    "ProcessResult",
    "parse_move",
    "process_move",
    # Sessions
    "SessionRegistry",
    "get_session_registry",
    # Persistence
    "GamePersistence",
    "GameStore",
    "get_game_persistence",
]
