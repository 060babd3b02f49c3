"""Tiny terminal UI helpers (prompt_toolkit-based).

Kept apart from the engine so the CLI can ask for a bulk scope interactively
while tests drive the prompt through a pipe input.
"""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.validation import ValidationError, Validator

from .models import Scope

SCOPE_HELP: dict[Scope, str] = {
    Scope.SINGLE: "only this occurrence",
    Scope.FOLLOWING: "this and later occurrences of the series",
    Scope.ALL: "every occurrence of the series",
}


def match_scope(text: str) -> Scope | None:
    """Return the scope ``text`` names or uniquely prefixes (case-insensitive)."""

    lower = text.strip().lower()
    if not lower:
        return None
    hits = [s for s in Scope if s.value.startswith(lower)]
    exact = [s for s in hits if s.value == lower]
    if exact:
        return exact[0]
    return hits[0] if len(hits) == 1 else None


class _ScopeValidator(Validator):
    def validate(self, document) -> None:
        text = document.text
        if text.strip() and match_scope(text) is None:
            raise ValidationError(
                message=f"Choose one of: {', '.join(s.value for s in Scope)}",
                cursor_position=len(text),
            )


def select_scope(
    default: Scope | str = Scope.SINGLE,
    *,
    session: PromptSession | None = None,
    message: str = "Apply to [single/following/all] (Enter to accept): ",
) -> Scope:
    """Prompt for a bulk-operation scope.

    The default is pre-filled; Enter accepts it, a unique prefix such as
    ``"f"`` selects ``following``. Unknown input is rejected in place.
    """

    default = Scope(default)
    completer = WordCompleter(
        [s.value for s in Scope],
        meta_dict={s.value: SCOPE_HELP[s] for s in Scope},
        ignore_case=True,
        sentence=True,
    )
    sess: PromptSession = session if session is not None else PromptSession()
    result = sess.prompt(
        message,
        default=default.value,
        completer=completer,
        validator=_ScopeValidator(),
        validate_while_typing=False,
    )
    return match_scope(result) or default


__all__ = ["SCOPE_HELP", "match_scope", "select_scope"]
