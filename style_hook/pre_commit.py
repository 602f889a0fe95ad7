"""Code style pre-commit hook.

Checks staged source files with a style checker and offers to apply an
autoformatter before committing. The formatter only ever runs on scratch copies;
the working tree and the index are changed only when the user accepts the
formatted result.
"""

import sys
from collections.abc import Sequence
from typing import Optional

from style_hook.config import LOG_DIR_NAME, load_config, parse_args
from style_hook.decision import Outcome
from style_hook.engine import DecisionEngine
from style_hook.errors import ConfigurationError, ToolError
from style_hook.git import GitRepository, get_git_root, show_diff
from style_hook.prompt import TerminalPrompter
from style_hook.reporting import ConsoleReporter, log_error, print_error, print_warning
from style_hook.tools import Formatter, StyleChecker, ensure_tools_available


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the code style pre-commit hook.

    Args:
        argv: Command line arguments, see ``style_hook.config.parse_args``.

    Returns:
        Exit code: 0 if the commit may proceed, 1 if it is blocked.
    """
    if argv is None:
        argv = sys.argv[1:]

    try:
        print("Codestyle pre-commit check enabled.")

        try:
            git_root = get_git_root()
        except RuntimeError as e:
            log_error("Failed to get git repository root", e)
            return 1

        git = GitRepository(git_root)
        config = load_config(
            git_root, parse_args(argv), default_log_dir=git.git_path(LOG_DIR_NAME)
        )
        ensure_tools_available(config)

        files = git.changed_files(config.extensions)

        engine = DecisionEngine(
            toggles=config.toggles,
            git=git,
            checker=StyleChecker(config.checker_command, config.checker_config, config.timeout),
            formatter=Formatter(config.formatter_command, config.formatter_config, config.timeout),
            prompter=TerminalPrompter(),
            diff_viewer=show_diff,
            reporter=ConsoleReporter(),
            original_log=config.original_log,
            formatted_log=config.formatted_log,
        )
        decision = engine.run(files)

        for warning in decision.warnings:
            print_warning(warning)
        if decision.outcome is Outcome.ABORTED:
            print_error(decision.message)
        else:
            print(decision.message)
        return decision.exit_code

    except ConfigurationError as e:
        print_error(str(e))
        return 1
    except ToolError as e:
        log_error("External tool failed", e)
        return 1
    except RuntimeError as e:
        log_error("Error while running the style hook", e)
        return 1
    except KeyboardInterrupt:
        print_error("Commit cancelled.")
        return 1
    except Exception as e:
        log_error("Unexpected error in main hook execution", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
