"""Decision engine of the style pre-commit hook.

Gathers evidence from the style checker and the autoformatter in a fixed order
and decides, as early as the evidence allows, whether the commit proceeds with
formatting applied, proceeds unchanged, or is aborted:

1. checker on the original files (only when the formatter is disabled, or when
   a clean checker pass may skip the formatter),
2. formatter on scratch copies,
3. checker on the formatted copies,
4. comparison of the copies with the originals,
5. checker on the original files, if their result is still needed,
6. the interactive menu.

Later steps are skipped whenever an earlier one already settles the outcome.
"""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Optional

from style_hook.decision import (
    Action,
    CheckResult,
    Decision,
    FeatureToggles,
    Outcome,
    build_action_menu,
    menu_headline,
)
from style_hook.git import show_diff
from style_hook.reporting import ConsoleReporter
from style_hook.workspace import ScratchWorkspace


class DecisionEngine:
    """Runs one hook invocation against its collaborators.

    Args:
        toggles: Feature switches for this run.
        git: Version control provider with a ``root`` path and ``stage(path)``.
        checker: Object with ``check(root, files, log_path, stop_on_first)``
            returning a ``CheckReport``.
        formatter: Object with ``format(paths)`` formatting files in place.
        prompter: Object with ``present_menu(labels)`` and ``confirm(question)``.
        diff_viewer: Called with the originals snapshot and the formatted copies.
        reporter: Object with ``progress(*lines)`` and
            ``violations(header, files, log_path)`` receiving all user-facing
            output. Defaults to a ``ConsoleReporter``.
        workspace_factory: Called with ``(root, files)``, returns a context
            manager behaving like ``ScratchWorkspace``.
        original_log: Where the checker output for the original files goes.
        formatted_log: Where the checker output for the formatted copies goes.
    """

    def __init__(
        self,
        toggles: FeatureToggles,
        git: Any,
        checker: Any,
        formatter: Any,
        prompter: Any,
        diff_viewer: Callable[[Path, Path], None] = show_diff,
        reporter: Any = None,
        workspace_factory: Callable[[Path, Sequence[str]], Any] = ScratchWorkspace,
        original_log: Optional[Path] = None,
        formatted_log: Optional[Path] = None,
    ):
        self.toggles = toggles
        self.git = git
        self.checker = checker
        self.formatter = formatter
        self.prompter = prompter
        self.diff_viewer = diff_viewer
        self.reporter = reporter if reporter is not None else ConsoleReporter()
        self.workspace_factory = workspace_factory
        self.original_log = original_log
        self.formatted_log = formatted_log

    def run(self, files: Sequence[str]) -> Decision:
        """Decide what happens to the commit of ``files``.

        Args:
            files: Repository-relative paths of the changed files.

        Returns:
            The decision, including the outcome that sets the exit status.
        """
        toggles = self.toggles
        files = tuple(files)

        if not toggles.checker_enabled and not toggles.formatter_enabled:
            return Decision(
                Outcome.PROCEED_WITHOUT_FORMATTING,
                "Style checker and autoformatter are both disabled, nothing to do.",
            )

        if not files:
            return Decision(Outcome.PROCEED_WITHOUT_FORMATTING, "No matching files changed.")

        if not toggles.formatter_enabled:
            return self._check_only(files)

        violates_original = CheckResult.UNKNOWN
        if toggles.checker_enabled and toggles.skip_formatter_if_clean:
            self.reporter.progress("Running checkstyle...")
            report = self.checker.check(
                self.git.root, files, log_path=self.original_log, stop_on_first=True
            )
            if not report.result.violated:
                return Decision(
                    Outcome.PROCEED_WITHOUT_FORMATTING, "Checkstyle ok, skipping autoformatter."
                )
            self.reporter.progress(
                f"Checkstyle violation found in file {report.violating_files[0]}."
            )
            violates_original = CheckResult.VIOLATED

        with self.workspace_factory(self.git.root, files) as workspace:
            return self._format_and_decide(workspace, files, violates_original)

    def _check_only(self, files: tuple[str, ...]) -> Decision:
        self.reporter.progress("Running checkstyle...")
        report = self.checker.check(self.git.root, files, log_path=self.original_log)
        if not report.result.violated:
            return Decision(Outcome.PROCEED_WITHOUT_FORMATTING, "Checkstyle ok.")

        self.reporter.violations(
            "Checkstyle violations found in the following file(s):",
            report.violating_files,
            report.log_path,
        )
        if not self.toggles.allow_violations:
            return Decision(
                Outcome.ABORTED,
                "Commit cancelled. Please fix the checkstyle issues.",
                violating_files=report.violating_files,
            )
        return self._confirm_violations(
            "There are checkstyle violations. Commit anyway?", report.violating_files
        )

    def _format_and_decide(
        self, workspace: Any, files: tuple[str, ...], violates_original: CheckResult
    ) -> Decision:
        self.reporter.progress("Running autoformatter, this can take a few seconds...")
        copies = workspace.copy_in()
        self.formatter.format(copies)

        violates_formatted = CheckResult.UNKNOWN
        formatted_violations: tuple[str, ...] = ()
        if self.toggles.checker_enabled:
            report = self.checker.check(
                workspace.working_copy_dir, files, log_path=self.formatted_log
            )
            violates_formatted = report.result
            formatted_violations = report.violating_files
            if violates_formatted.violated:
                self.reporter.violations(
                    "Checkstyle violations found (with formatter applied) in the following file(s):",
                    report.violating_files,
                    report.log_path,
                )
                if not self.toggles.allow_violations:
                    return Decision(
                        Outcome.ABORTED,
                        "Commit cancelled. Please fix the checkstyle issues.",
                        violating_files=formatted_violations,
                    )

        changed = workspace.changed_files()
        if not changed:
            if not violates_formatted.violated:
                return Decision(
                    Outcome.PROCEED_WITHOUT_FORMATTING, "Files already correctly formatted."
                )
            return self._confirm_violations(
                "Nothing to do for the autoformatter, but there are still checkstyle "
                "violations. Commit anyway?",
                formatted_violations,
            )

        if self.toggles.checker_enabled and violates_original is CheckResult.UNKNOWN:
            violates_original = self._resolve_original(files, violates_formatted)

        return self._menu_loop(
            workspace, changed, violates_original, violates_formatted, formatted_violations
        )

    def _resolve_original(
        self, files: tuple[str, ...], violates_formatted: CheckResult
    ) -> CheckResult:
        # Formatting is assumed never to introduce violations, so violations
        # after formatting imply violations before it.
        if violates_formatted.violated and self.toggles.assume_formatter_safe:
            return CheckResult.VIOLATED
        self.reporter.progress("Running checkstyle on original files...")
        report = self.checker.check(
            self.git.root, files, log_path=self.original_log, stop_on_first=True
        )
        return report.result

    def _menu_loop(
        self,
        workspace: Any,
        changed: tuple[str, ...],
        violates_original: CheckResult,
        violates_formatted: CheckResult,
        formatted_violations: tuple[str, ...],
    ) -> Decision:
        menu = build_action_menu(
            violates_original,
            violates_formatted,
            self.toggles.allow_violations,
            checker_enabled=self.toggles.checker_enabled,
        )
        labels = [action.label for action in menu]

        while True:
            self.reporter.progress("", *menu_headline(violates_original, violates_formatted))
            action = Action.from_label(self.prompter.present_menu(labels))

            if action is Action.VIEW_DIFF:
                self.diff_viewer(workspace.originals_snapshot(), workspace.working_copy_dir)
                continue

            if action is Action.CANCEL:
                return Decision(Outcome.ABORTED, "Commit cancelled.", action=action)

            if action in (Action.APPLY, Action.APPLY_VIOLATING):
                for file in changed:
                    workspace.apply(file)
                    self.git.stage(file)
                warnings = ()
                if action.violating:
                    warnings = ("Committing formatted files that still violate checkstyle.",)
                return Decision(
                    Outcome.PROCEED_WITH_FORMATTING,
                    f"Autoformatter applied to {len(changed)} file(s).",
                    action=action,
                    applied_files=changed,
                    violating_files=formatted_violations,
                    warnings=warnings,
                )

            warnings = ()
            if action.violating:
                warnings = ("Committing unformatted files that violate checkstyle.",)
            return Decision(
                Outcome.PROCEED_WITHOUT_FORMATTING,
                "Committing without formatting.",
                action=action,
                warnings=warnings,
            )

    def _confirm_violations(self, question: str, violating_files: tuple[str, ...]) -> Decision:
        self.reporter.progress("")
        if self.prompter.confirm(question):
            return Decision(
                Outcome.PROCEED_WITHOUT_FORMATTING,
                "Committing with checkstyle violations.",
                violating_files=violating_files,
                warnings=("Committed files violate checkstyle.",),
            )
        return Decision(
            Outcome.ABORTED,
            "Commit cancelled due to checkstyle violations.",
            violating_files=violating_files,
        )
