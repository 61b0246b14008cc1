"""
Noughts CLI - Command-line interface for the engine.

Usage:
    noughts play [--delay S] [--voice V]    Play against the opponent in the terminal
    noughts serve [--host H] [--port P]     Run the HTTP/WebSocket API
"""

import argparse
import asyncio
import logging
import os
import sys

from .engine_core.state import GameState, HUMAN_MARK, OPPONENT_MARK
from .engine_core.action import GameResult
from .session import (
    GameEngine,
    HostCallbacks,
    MoveCoordinator,
    THINKING_DELAY_SECONDS,
    Voice,
    game_start_message,
    game_end_message,
)

HELP_TEXT = "Cells are numbered 1-9 left to right, top to bottom. n = new game, r = reset score, q = quit."


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Noughts - Tic-tac-toe against a heuristic opponent",
        prog="noughts",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("NOUGHTS_LOG_LEVEL", "WARNING"),
        help="Logging level (default: $NOUGHTS_LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument(
        "--delay", type=float, default=THINKING_DELAY_SECONDS,
        help="Opponent thinking delay in seconds",
    )
    play_parser.add_argument(
        "--voice", choices=[v.value for v in Voice], default=Voice.ASSISTANT.value,
        help="How the host talks",
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_play(args):
    """Play against the opponent in the terminal."""
    try:
        asyncio.run(play(delay=args.delay, voice=Voice(args.voice)))
    except KeyboardInterrupt:
        print()


def cmd_serve(args):
    """Run the API server."""
    import uvicorn

    print(f"Starting Noughts API at http://{args.host}:{args.port}")
    print(f"API documentation at http://{args.host}:{args.port}/api/docs")
    uvicorn.run(
        "noughts.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


def render_status(state: GameState) -> str:
    """One line under the board."""
    if state.game_over:
        if state.winner == HUMAN_MARK:
            return "🎉 You Won!"
        if state.winner == OPPONENT_MARK:
            return "🤖 I Won!"
        return "🤝 It's a Draw!"
    if state.current_player == HUMAN_MARK:
        return f"Your Turn ({HUMAN_MARK.value})"
    return f"My Turn ({OPPONENT_MARK.value})"


def print_state(state: GameState):
    score = state.score
    print()
    print(state.render())
    print(f"{render_status(state)}   You: {score.player_wins}  Me: {score.opponent_wins}  Draws: {score.draws}")


async def play(delay: float = THINKING_DELAY_SECONDS, voice: Voice = Voice.ASSISTANT):
    """
    Terminal host.

    The engine prints the board after every transition; the coordinator
    answers each of the human's moves after `delay` seconds.
    """
    engine = GameEngine()
    coordinator = MoveCoordinator(
        engine,
        delay=delay,
        loop=asyncio.get_running_loop(),
        on_thinking=lambda state: print("Thinking..."),
    )

    def on_game_end(result: GameResult):
        print(game_end_message(result, voice))
        print("Type n for a new game.")

    engine.subscribe(HostCallbacks(on_move=print_state, on_game_end=on_game_end))

    print(game_start_message(voice))
    print(HELP_TEXT)
    print_state(engine.state)

    try:
        while True:
            await coordinator.wait_idle()
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            command = line.strip().lower()

            if command in ("q", "quit", "exit"):
                break
            elif command in ("n", "new"):
                engine.new_game()
                print(game_start_message(voice))
            elif command in ("r", "reset"):
                engine.reset_score()
            elif command in ("h", "help", "?"):
                print(HELP_TEXT)
            elif command.isdecimal():
                before = engine.state
                after = engine.apply_move(int(command) - 1, HUMAN_MARK)
                if after is before:
                    print("Can't play there.")
            elif command:
                print(HELP_TEXT)
    finally:
        coordinator.close()


if __name__ == "__main__":
    main()
