"""
Bots module - Opponent decision-making.

Provides:
- BotPolicy: Interface for bot decision-making
- HeuristicPolicy: The built-in win/block/center/corner heuristic
- choose_move: The heuristic as a plain function
"""

from .policy import BotPolicy, BotDecision, HeuristicPolicy, MoveRule, choose_move, decide

__all__ = [
    "BotPolicy",
    "BotDecision",
    "HeuristicPolicy",
    "MoveRule",
    "choose_move",
    "decide",
]
