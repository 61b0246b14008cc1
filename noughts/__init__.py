"""
Noughts - Tic-tac-toe engine with a scheduled automa opponent.

A deterministic game core that a host application (a chat interface, a
terminal, a web client) drives one move at a time:
- Immutable game state and pure transitions
- Outcome evaluation and running score
- A single heuristic opponent policy
- A move coordinator that plays the opponent after a "thinking" delay
"""

__version__ = "0.1.0"
