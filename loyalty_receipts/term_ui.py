"""Terminal prompts (prompt_toolkit-based) used by the ``browse`` command.

Kept apart from the pipeline so the prompts can be driven from a pipe input
in tests.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.validation import ValidationError, Validator


def _session(session: PromptSession | None, kb: KeyBindings) -> PromptSession:
    if session is None:
        return PromptSession(key_bindings=kb)
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
        key_bindings=kb,
    )


def _escape_cancels() -> KeyBindings:
    kb = KeyBindings()

    @kb.add("escape")
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    @kb.add("c-c", eager=True)
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    return kb


class _ChoiceValidator(Validator):
    def __init__(self, allowed: set[str], *, allow_empty: bool, what: str) -> None:
        self._allowed = allowed
        self._allow_empty = allow_empty
        self._what = what

    def validate(self, document) -> None:
        text = document.text.strip()
        if not text and self._allow_empty:
            return
        if text not in self._allowed:
            raise ValidationError(message=f"Unknown {self._what}: {text!r}")


def select_member(
    members: Sequence[str] | Iterable[str],
    *,
    default: str = "",
    message: str = "Member id (Tab to complete, Enter to open, Esc to quit): ",
    session: PromptSession | None = None,
) -> str | None:
    """Prompt for one of ``members``; substring completion over the list.

    Returns the chosen member id, ``default`` when Enter is pressed on an
    empty buffer, or ``None`` when canceled with Esc/Ctrl+C or when nothing
    was chosen and there is no default.
    """

    words = list(members)
    completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=True)
    kb = _escape_cancels()
    sess = _session(session, kb)

    result = sess.prompt(
        message,
        completer=completer,
        validator=_ChoiceValidator(set(words), allow_empty=True, what="member"),
        validate_while_typing=False,
        key_bindings=kb,
    )
    if result is None:
        return None
    result = result.strip()
    if not result:
        return default or None
    return result


__all__ = ["select_member"]
