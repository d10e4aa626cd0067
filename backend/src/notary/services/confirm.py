"""Yes/no confirmation boundary for operations that add trust."""

from collections.abc import Callable

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes"})

ConfirmFn = Callable[[str], bool]


def is_affirmative(answer: str | None) -> bool:
    """True only for a single 'y' or 'yes' token, case-insensitive."""
    if answer is None:
        return False
    tokens = answer.split()
    return len(tokens) == 1 and tokens[0].lower() in AFFIRMATIVE_ANSWERS


def ask_confirm(prompt: str, read: Callable[[str], str] = input) -> bool:
    """Ask a yes/no question on the console.

    Read errors count as a negative answer.
    """
    try:
        answer = read(f"{prompt} (yes/no) ")
    except (EOFError, OSError):
        return False
    return is_affirmative(answer)


def always(answer: bool) -> ConfirmFn:
    """Confirmation function with a fixed answer."""

    def _confirm(prompt: str) -> bool:
        return answer

    return _confirm
