"""
Prompt helpers. Validation is a plain callback: the helper re-asks until it
returns True, the orchestrators never prompt themselves.
"""

from collections.abc import Callable, Sequence
from typing import TypeVar

from rich.console import Console
from rich.prompt import Prompt

T = TypeVar("T")


def prompt_until_valid(
    ask: Callable[[], T],
    validate: Callable[[T], bool],
    console: Console,
    error_message: str | None = None,
) -> T:
    answer = ask()
    while not validate(answer):
        if error_message:
            console.print(f"[red]{error_message}[/red]")
        answer = ask()
    return answer


def _print_choices(console: Console, message: str, choices: Sequence[str]) -> None:
    console.print(f"\n[bold]{message}[/bold]")
    for i, choice in enumerate(choices, start=1):
        console.print(f"  [cyan]{i}[/cyan]. {choice}")


def _resolve(answer: str, choices: Sequence[str]) -> str | None:
    answer = answer.strip()
    if answer.isdigit() and 1 <= int(answer) <= len(choices):
        return choices[int(answer) - 1]
    return answer if answer in choices else None


def choose(
    console: Console,
    message: str,
    choices: Sequence[str],
    default: str | None = None,
) -> str:
    """Pick one entry, by number or by name."""
    if not choices:
        raise ValueError(f"nothing to choose from for: {message}")
    _print_choices(console, message, choices)
    answer = prompt_until_valid(
        lambda: Prompt.ask("Selection", console=console, default=default),
        lambda a: _resolve(a or "", choices) is not None,
        console,
        "Must be one of the options listed!",
    )
    return _resolve(answer, choices)  # type: ignore[return-value]


def choose_many(console: Console, message: str, choices: Sequence[str]) -> list[str]:
    """Pick any number of entries as a comma separated list. Empty picks none."""
    _print_choices(console, message, choices)

    def parse(answer: str) -> list[str | None]:
        return [_resolve(part, choices) for part in answer.split(",") if part.strip()]

    answer = prompt_until_valid(
        lambda: Prompt.ask("Selection (comma separated)", console=console, default=""),
        lambda a: None not in parse(a),
        console,
        "Every entry must be one of the options listed!",
    )
    return [c for c in parse(answer) if c is not None]
