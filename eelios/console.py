"""Line-based console used by `print` and the `input` keyword."""

from typing import Optional


class Console:
    """Reads and writes whole lines on the standard streams.

    The evaluator only talks to the outside world through a console, so
    tests can pass their own object with the same two methods.
    """

    def read_line(self, prompt: Optional[str] = None) -> str:
        if prompt:
            print(prompt)
        try:
            return input()
        except EOFError:
            return ''

    def write_line(self, text: str) -> None:
        print(text)


class BufferedConsole(Console):
    """Console that replays scripted input and records output in memory."""

    def __init__(self, lines=()):
        self.pending = list(lines)
        self.prompts = []
        self.output = []

    def read_line(self, prompt: Optional[str] = None) -> str:
        if prompt:
            self.prompts.append(prompt)
        return self.pending.pop(0) if self.pending else ''

    def write_line(self, text: str) -> None:
        self.output.append(text)
