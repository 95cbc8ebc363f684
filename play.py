#!/usr/bin/env python3
"""
CodeFight - Command Line Interface

Play CodeFight interactively: register programs, start a match and step
through it one instruction at a time.

Usage:
    # Arena of 20 cells, symbols _ * ! ?, two program symbol pairs
    python play.py 20 _ * ! ? A a B b

    # Take the arena size and init mode from config.env
    python play.py --env config.env

    # Log every executed instruction
    python play.py --verbose 20 _ * ! ? A a B b
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TextIO, Tuple

from codefight.config import GameConfig, InitMode, check_seed, parse_init_mode
from codefight.errors import CodeFightError
from codefight.game import GameSystem
from codefight.instructions import parse_argument_list
from codefight import render

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Error, "
WELCOME_MESSAGE = "Welcome to CodeFight 2024. Enter 'help' for more details."

REQUIRES_RUNNING_MESSAGE = "This command can only be used while the game is running."
REQUIRES_STOPPED_MESSAGE = "This command can only be used while the game is stopped."
ALWAYS_USABLE_MESSAGE = "This command can always be used."

# Argument count accepted by commands with optional arguments
VARIABLE_ARGUMENTS = -1


@dataclass
class Command:
    """One interactive command and when it may be used."""
    handler: Callable[[List[str]], Optional[str]]
    argument_count: int
    requires_running: Optional[bool]  # None: usable in any state
    description: str

    @property
    def requirement(self) -> str:
        if self.requires_running is None:
            return ALWAYS_USABLE_MESSAGE
        if self.requires_running:
            return REQUIRES_RUNNING_MESSAGE
        return REQUIRES_STOPPED_MESSAGE


class CommandLineInterface:
    """
    Line-oriented front end over a GameSystem.

    Each input line is ``command [arguments...]`` separated by single
    spaces. Results go to ``out``; failures go to ``err`` prefixed with
    ``Error, `` and the loop keeps reading.
    """

    def __init__(self, game: GameSystem):
        """
        Initialize the interface.

        Args:
            game: The game system the commands operate on
        """
        self.game = game
        self.running = False
        self.commands: Dict[str, Command] = {
            "add-ai": Command(
                self.add_ai, 2, False,
                "With it, you can add uniquely named AIs and the argument format "
                "should be: [Name] [Command name],[int],[int]",
            ),
            "remove-ai": Command(
                self.remove_ai, 1, False,
                "Removes a previously added AI.",
            ),
            "set-init-mode": Command(
                self.set_init_mode, VARIABLE_ARGUMENTS, False,
                "Chooses the storage initialization: INIT_MODE_STOP or "
                "INIT_MODE_RANDOM [seed].",
            ),
            "start-game": Command(
                self.start_game, VARIABLE_ARGUMENTS, False,
                "With it, you can start a new game using at least 2 previously added AIs.",
            ),
            "next": Command(
                self.next, VARIABLE_ARGUMENTS, True,
                "Executes the given number of turns (default 1).",
            ),
            "show-memory": Command(
                self.show_memory, VARIABLE_ARGUMENTS, True,
                "Shows a quick overview, or a detailed view from the given cell on.",
            ),
            "show-ai": Command(
                self.show_ai, 1, True,
                "Shows the current status of any currently playing AI.",
            ),
            "end-game": Command(
                self.end_game, 0, True,
                "This will end the currently running game.",
            ),
            "help": Command(
                self.help, 0, None,
                "Displays a short description of all currently available commands.",
            ),
            "quit": Command(
                self.quit, 0, None,
                "Quits the program.",
            ),
        }

    def execute(self, line: str) -> Tuple[bool, Optional[str]]:
        """
        Run one input line.

        Returns:
            ``(success, message)``; message is None when there is nothing to print
        """
        parts = line.strip().split(" ")
        name, arguments = parts[0], parts[1:]

        command = self.commands.get(name)
        if command is None:
            return False, f"command '{name}' not found!"
        if command.argument_count not in (VARIABLE_ARGUMENTS, len(arguments)):
            return False, f"wrong number of arguments for command '{name}'!"
        if command.requires_running is not None and command.requires_running != self.game.is_running:
            if self.game.is_running:
                return False, f"the game must be stopped to use the command '{name}'!"
            return False, f"the game must be running to use the command '{name}'!"

        try:
            return True, command.handler(arguments)
        except CodeFightError as e:
            logger.debug("%s failed: %s", name, e)
            return False, str(e)

    def run(self, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout, stderr: TextIO = sys.stderr):
        """Read commands until ``quit`` or end of input."""
        self.running = True
        for line in stdin:
            success, message = self.execute(line.rstrip("\n"))
            if message:
                if success:
                    print(message, file=stdout)
                else:
                    print(ERROR_PREFIX + message, file=stderr)
            if not self.running:
                break

    # Commands

    def add_ai(self, arguments: List[str]) -> str:
        name, script = arguments
        self.game.register_program(name, parse_argument_list(script))
        return name

    def remove_ai(self, arguments: List[str]) -> str:
        name = arguments[0]
        self.game.remove_program(name)
        return name

    def set_init_mode(self, arguments: List[str]) -> Optional[str]:
        if not arguments:
            raise CodeFightError("wrong number of arguments for command 'set-init-mode'!")
        mode = parse_init_mode(arguments[0])
        expected = 2 if mode is InitMode.INIT_MODE_RANDOM else 1
        if len(arguments) != expected:
            raise CodeFightError("wrong number of arguments for command 'set-init-mode'!")

        seed = 0
        if mode is InitMode.INIT_MODE_RANDOM:
            try:
                seed = int(arguments[1])
            except ValueError:
                raise CodeFightError("the entered seed should be a number!")
            check_seed(seed)

        unchanged = self.game.init_mode is InitMode.INIT_MODE_STOP and mode is InitMode.INIT_MODE_STOP
        old, new = self.game.set_init_mode(mode, seed)
        if unchanged:
            return None
        return render.render_init_mode_change(old, new)

    def start_game(self, arguments: List[str]) -> str:
        if not 2 <= len(arguments) <= self.game.config.max_programs:
            raise CodeFightError("wrong number of arguments for command 'start-game'!")
        self.game.start_match(arguments)
        return "Game started."

    def next(self, arguments: List[str]) -> Optional[str]:
        if len(arguments) > 1:
            raise CodeFightError("please only enter one number or leave the argument blank!")
        turns = 1
        if arguments:
            try:
                turns = int(arguments[0])
            except ValueError:
                raise CodeFightError("the entered argument should be a number or empty!")
        result = self.game.step(turns)
        return render.render_eliminations(result) or None

    def show_memory(self, arguments: List[str]) -> str:
        if len(arguments) > 1:
            raise CodeFightError("please only enter one number or leave the argument blank!")
        if not arguments:
            return render.render_overview(self.game)
        try:
            position = int(arguments[0])
        except ValueError:
            raise CodeFightError("only numbers are allowed for the command 'show-memory'!")
        return render.render_detailed(self.game, position)

    def show_ai(self, arguments: List[str]) -> str:
        return render.render_program_status(self.game.inspect_program(arguments[0]))

    def end_game(self, arguments: List[str]) -> str:
        return render.render_summary(self.game.end_match())

    def help(self, arguments: List[str]) -> str:
        lines = []
        for name in sorted(self.commands):
            command = self.commands[name]
            if command.requires_running is None or command.requires_running == self.game.is_running:
                lines.append(f"{name}: {command.requirement} {command.description}")
        return "\n".join(lines)

    def quit(self, arguments: List[str]) -> None:
        self.running = False
        return None


def build_config(tokens: List[str], env_file: Optional[str] = None) -> GameConfig:
    """Startup arguments win over ``config.env``."""
    if tokens:
        return GameConfig.from_args(tokens)
    return GameConfig.from_env(env_file)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="CodeFight - programs battling in a circular memory arena",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python play.py 20 _ * ! ? A a B b
  python play.py 42 . # @ + A a B b C c D d
  python play.py --env config.env
        """
    )

    parser.add_argument(
        "tokens",
        nargs="*",
        help="Arena size, four general symbols, then symbol/bomb pairs",
    )

    parser.add_argument(
        "--env",
        type=str,
        help="Read CODEFIGHT_* settings from this file when no tokens are given",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every executed instruction",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        config = build_config(args.tokens, args.env)
    except CodeFightError as e:
        print(ERROR_PREFIX + str(e))
        return 1

    print(WELCOME_MESSAGE)
    CommandLineInterface(GameSystem(config)).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
