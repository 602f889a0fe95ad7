"""Decision model for the style pre-commit hook.

Holds the value types the decision engine works with (check results, feature
toggles, menu actions and outcomes) and the pure functions that turn check
evidence into the menu shown to the user. Nothing in here touches files,
processes or the terminal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CheckResult(Enum):
    """Result of one checker pass over a set of files."""

    UNKNOWN = "unknown"
    CLEAN = "clean"
    VIOLATED = "violated"

    @classmethod
    def from_exit_status(cls, returncode: int) -> "CheckResult":
        """Map a checker exit status to a result (nonzero means violations)."""
        return cls.CLEAN if returncode == 0 else cls.VIOLATED

    @property
    def violated(self) -> bool:
        return self is CheckResult.VIOLATED


class Outcome(Enum):
    """Terminal result of one hook run."""

    PROCEED_WITH_FORMATTING = "proceed-with-formatting"
    PROCEED_WITHOUT_FORMATTING = "proceed-without-formatting"
    ABORTED = "aborted"

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 lets the commit proceed, 1 blocks it."""
        return 1 if self is Outcome.ABORTED else 0


class Action(Enum):
    """Options the user can pick from when the formatter has changes to offer."""

    APPLY = "Apply Formatter & Commit"
    APPLY_VIOLATING = "Apply Formatter & Commit (VIOLATES CHECKSTYLE!)"
    VIEW_DIFF = "View Formatter Diff"
    CANCEL = "Cancel Commit"
    COMMIT_UNFORMATTED = "Commit Without Formatting"
    COMMIT_UNFORMATTED_VIOLATING = "Commit Without Formatting (VIOLATES CHECKSTYLE!)"

    @property
    def label(self) -> str:
        return self.value

    @property
    def terminal(self) -> bool:
        """Whether picking this action ends the menu loop."""
        return self is not Action.VIEW_DIFF

    @property
    def outcome(self) -> Optional[Outcome]:
        """The outcome selecting this action leads to, None for VIEW_DIFF."""
        return _ACTION_OUTCOMES.get(self)

    @property
    def violating(self) -> bool:
        """Whether this action commits content that still violates the checker."""
        return self in (Action.APPLY_VIOLATING, Action.COMMIT_UNFORMATTED_VIOLATING)

    @classmethod
    def from_label(cls, label: str) -> "Action":
        """Look up an action by its menu label.

        Raises:
            ValueError: If no action carries the label.
        """
        for action in cls:
            if action.label == label:
                return action
        raise ValueError(f"Unknown menu option: {label!r}")


_ACTION_OUTCOMES: dict[Action, Outcome] = {
    Action.APPLY: Outcome.PROCEED_WITH_FORMATTING,
    Action.APPLY_VIOLATING: Outcome.PROCEED_WITH_FORMATTING,
    Action.CANCEL: Outcome.ABORTED,
    Action.COMMIT_UNFORMATTED: Outcome.PROCEED_WITHOUT_FORMATTING,
    Action.COMMIT_UNFORMATTED_VIOLATING: Outcome.PROCEED_WITHOUT_FORMATTING,
}


@dataclass(frozen=True)
class FeatureToggles:
    """Feature switches, fixed before the run starts.

    Attributes:
        checker_enabled: Run the style checker at all.
        formatter_enabled: Run the autoformatter on scratch copies.
        skip_formatter_if_clean: Check the originals first and skip the (slow)
            formatter when they are already clean.
        allow_violations: Allow committing content the checker rejects, after
            an explicit confirmation.
        assume_formatter_safe: When the formatted copies violate, assume the
            originals do too instead of checking them. Faster, but the result
            attributed to the originals is inferred rather than measured.
    """

    checker_enabled: bool = True
    formatter_enabled: bool = True
    skip_formatter_if_clean: bool = False
    allow_violations: bool = False
    assume_formatter_safe: bool = True


@dataclass(frozen=True)
class Decision:
    """What the engine decided for one run, and why."""

    outcome: Outcome
    message: str
    action: Optional[Action] = None
    applied_files: tuple[str, ...] = ()
    violating_files: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code


def build_action_menu(
    violates_original: CheckResult,
    violates_formatted: CheckResult,
    allow_violations: bool,
    checker_enabled: bool = True,
) -> list[Action]:
    """Build the ordered list of options offered when the formatter changed files.

    Args:
        violates_original: Checker result for the original files. Must not be
            UNKNOWN while the checker is enabled.
        violates_formatted: Checker result for the formatted copies.
        allow_violations: Whether committing with violations may be offered.
        checker_enabled: Whether the checker ran at all. When it did not, no
            option is flagged as violating.

    Returns:
        Apply (plain or flagged), view diff, cancel, then the commit-without-
        formatting variant the evidence and policy allow, if any.

    Raises:
        ValueError: If the original result is still UNKNOWN with the checker on.
    """
    if checker_enabled and violates_original is CheckResult.UNKNOWN:
        raise ValueError("Original files must be checked before building the menu")

    menu = [
        Action.APPLY_VIOLATING if violates_formatted.violated else Action.APPLY,
        Action.VIEW_DIFF,
        Action.CANCEL,
    ]
    if not violates_original.violated:
        menu.append(Action.COMMIT_UNFORMATTED)
    elif allow_violations:
        menu.append(Action.COMMIT_UNFORMATTED_VIOLATING)
    return menu


def menu_headline(
    violates_original: CheckResult, violates_formatted: CheckResult
) -> list[str]:
    """Explanation printed above the menu."""
    lines = ["There are new/changed files that are not yet autoformatted correctly."]
    if violates_original.violated and not violates_formatted.violated:
        lines.append("There are also checkstyle violations, but they can be fixed automatically.")
    elif violates_original.violated and violates_formatted.violated:
        lines.append("There are also checkstyle violations that cannot be fixed automatically.")
    return lines
