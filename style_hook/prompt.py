"""Interactive questions asked on the controlling terminal.

Git runs pre-commit hooks with stdin detached from the terminal, so questions
are asked on ``/dev/tty`` instead of stdin/stdout.
"""

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Optional, TextIO

from style_hook.decision import Action
from style_hook.errors import ConfigurationError


class TerminalPrompter:
    """Menu selection and yes/no confirmation on the controlling terminal.

    Args:
        tty_path: Terminal device to read answers from and write questions to.
        input_stream: Stream to read answers from instead of the terminal.
        output_stream: Stream to write questions to instead of the terminal.
    """

    def __init__(
        self,
        tty_path: str = "/dev/tty",
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
    ):
        self.tty_path = tty_path
        self.input_stream = input_stream
        self.output_stream = output_stream

    @contextmanager
    def _terminal(self) -> Iterator[tuple[TextIO, TextIO]]:
        if self.input_stream is not None and self.output_stream is not None:
            yield self.input_stream, self.output_stream
            return
        try:
            reader = open(self.tty_path, "r", encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Cannot ask for confirmation, no terminal available ({self.tty_path}): {e}"
            ) from e
        with reader:
            try:
                writer = open(self.tty_path, "w", encoding="utf-8")
            except OSError as e:
                raise ConfigurationError(
                    f"Cannot ask for confirmation, no terminal available ({self.tty_path}): {e}"
                ) from e
            with writer:
                yield reader, writer

    def present_menu(self, labels: Sequence[str]) -> str:
        """Ask the user to pick one of ``labels``, shell ``select`` style.

        Invalid answers re-prompt. End of input picks the cancel option.

        Raises:
            ConfigurationError: On end of input when no cancel option is offered.
        """
        if not labels:
            raise ValueError("A menu needs at least one option")
        with self._terminal() as (reader, writer):
            for number, label in enumerate(labels, 1):
                writer.write(f"{number}) {label}\n")
            while True:
                answer = self._ask(reader, writer, "#? ")
                if answer is None:
                    if Action.CANCEL.label in labels:
                        return Action.CANCEL.label
                    raise ConfigurationError(
                        "No answer given and the menu offers no way to cancel"
                    )
                if answer.isdecimal() and 1 <= int(answer) <= len(labels):
                    return labels[int(answer) - 1]

    def confirm(self, question: str) -> bool:
        """Ask a yes/no question; answers starting with y or Y mean yes."""
        with self._terminal() as (reader, writer):
            answer = self._ask(reader, writer, f"{question} (y/n)? ")
        return answer is not None and answer[:1] in ("y", "Y")

    @staticmethod
    def _ask(reader: TextIO, writer: TextIO, prompt: str) -> Optional[str]:
        writer.write(prompt)
        writer.flush()
        line = reader.readline()
        if not line:
            return None
        return line.strip()
