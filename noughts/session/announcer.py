"""
Announcer - What the host says when a game starts or ends.

Two voices: the default assistant and a playful gamer.
"""

from __future__ import annotations
from enum import Enum

from ..engine_core.action import GameResult


class Voice(str, Enum):
    ASSISTANT = "assistant"
    GAMER = "gamer"


GAME_START = {
    Voice.ASSISTANT: "Let's play Tic Tac Toe! You'll be X and I'll be O. Good luck! 🎯",
    Voice.GAMER: "Let's play some Tic Tac Toe! You're X, I'm O. Let's see what you got! 🎮",
}

GAME_END = {
    Voice.ASSISTANT: {
        GameResult.WIN: "Congratulations! Well played! 🎉",
        GameResult.LOSE: "I won this round! Great game though! 🤖",
        GameResult.DRAW: "A draw! We're evenly matched! 🤝",
    },
    Voice.GAMER: {
        GameResult.WIN: "GG! You got me this time! 🎮",
        GameResult.LOSE: "BOOM! I got you! Want a rematch? 😎",
        GameResult.DRAW: "It's a tie! We're both pros! 🤝",
    },
}


def game_start_message(voice: Voice = Voice.ASSISTANT) -> str:
    return GAME_START[Voice(voice)]


def game_end_message(result: GameResult, voice: Voice = Voice.ASSISTANT) -> str:
    return GAME_END[Voice(voice)][result]
