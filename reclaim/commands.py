"""
Command variants executed by the runner.

Every mutating step of a cleanup action is one of three frozen
descriptions: a single process, an xargs-style pipe of two processes, or an
in-process filesystem operation. Each knows how to describe itself for the
log and how to execute with its output appended to a binary stream.
"""

import subprocess
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Optional, Sequence, Union


@dataclass(frozen=True)
class ProcessCommand:
    """Run one executable with fixed arguments."""

    argv: Sequence[str]
    failure_message: str
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "argv", tuple(self.argv))
        if not self.description:
            object.__setattr__(self, "description", " ".join(self.argv))

    def execute(self, stream: BinaryIO) -> int:
        result = subprocess.run(
            list(self.argv), stdout=stream, stderr=subprocess.STDOUT, check=False
        )
        return result.returncode


@dataclass(frozen=True)
class PipeCommand:
    """Feed the words printed by ``producer`` as arguments to ``consumer``.

    Like ``xargs -r``, the consumer is not run when the producer prints
    nothing.
    """

    producer: Sequence[str]
    consumer: Sequence[str]
    failure_message: str
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "producer", tuple(self.producer))
        object.__setattr__(self, "consumer", tuple(self.consumer))
        if not self.description:
            object.__setattr__(
                self,
                "description",
                f"{' '.join(self.producer)} | xargs -r {' '.join(self.consumer)}",
            )

    def execute(self, stream: BinaryIO) -> int:
        produced = subprocess.run(
            list(self.producer), capture_output=True, text=True, errors="replace", check=False
        )
        if produced.stderr:
            stream.write(produced.stderr.encode("utf-8"))
        if produced.returncode != 0:
            return produced.returncode

        items = produced.stdout.split()
        if not items:
            return 0

        consumed = subprocess.run(
            list(self.consumer) + items, stdout=stream, stderr=subprocess.STDOUT, check=False
        )
        return consumed.returncode


@dataclass(frozen=True)
class FileCommand:
    """Run a filesystem operation in-process.

    The operation signals failure by raising ``OSError``. If it returns
    text, that text is appended to the log verbatim.
    """

    func: Callable[..., Optional[str]]
    description: str
    failure_message: str
    args: tuple = field(default_factory=tuple)

    def execute(self, stream: BinaryIO) -> int:
        output = self.func(*self.args)
        if output:
            if not output.endswith("\n"):
                output += "\n"
            stream.write(output.encode("utf-8"))
        return 0


Command = Union[ProcessCommand, PipeCommand, FileCommand]
