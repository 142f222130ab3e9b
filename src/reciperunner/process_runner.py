"""Process execution abstraction layer.

Command lines are dispatched through a ProcessRunner so the executor can be
tested without spawning shells, and so subprocess output can be filtered.
"""

import subprocess
import sys
from abc import ABC, abstractmethod
from enum import Enum
from threading import Thread
from typing import Any, TextIO

__all__ = [
    "CommandOutput",
    "ProcessRunner",
    "PassthroughProcessRunner",
    "SilentProcessRunner",
    "StreamingProcessRunner",
    "make_process_runner",
    "stream_output",
]

from reciperunner.logging import Logger


class CommandOutput(Enum):
    """Which streams of a command's output reach the terminal."""

    ALL = "all"
    OUT = "out"
    ERR = "err"
    NONE = "none"


class ProcessRunner(ABC):
    """Abstract interface for running subprocess commands."""

    @abstractmethod
    def run(self, *args: Any, **kwargs: Any) -> subprocess.CompletedProcess[Any]:
        """
        Run a subprocess command.

        The signature matches subprocess.run() so implementations can delegate
        to it directly.

        Returns:
            subprocess.CompletedProcess: The completed process result
        """
        ...


class PassthroughProcessRunner(ProcessRunner):
    """Process runner that directly delegates to subprocess.run."""

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def run(self, *args: Any, **kwargs: Any) -> subprocess.CompletedProcess[Any]:
        return subprocess.run(*args, **kwargs)


class SilentProcessRunner(ProcessRunner):
    """Process runner that discards all subprocess output."""

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def run(self, *args: Any, **kwargs: Any) -> subprocess.CompletedProcess[Any]:
        kwargs["stdout"] = subprocess.DEVNULL
        kwargs["stderr"] = subprocess.DEVNULL
        return subprocess.run(*args, **kwargs)


def stream_output(pipe: Any, target: TextIO) -> None:
    """
    Copy lines from a pipe to a target stream until the pipe closes.

    A pipe closed underneath the reader (process killed, stream closed) ends
    the copy without raising, so the streaming thread never dies noisily.
    """
    if pipe:
        try:
            for line in pipe:
                target.write(line)
                target.flush()
        except (OSError, ValueError):
            pass


class StreamingProcessRunner(ProcessRunner):
    """
    Process runner that keeps one output stream and discards the other.

    The kept stream is read through a pipe on a helper thread and written to
    the current sys.stdout / sys.stderr, so it is visible to anything that
    replaces those objects. The call stays synchronous for the caller.
    """

    JOIN_TIMEOUT_SECS = 1.0

    def __init__(self, logger: Logger, keep_stdout: bool) -> None:
        self._logger = logger
        self._keep_stdout = keep_stdout

    def run(self, *args: Any, **kwargs: Any) -> subprocess.CompletedProcess[Any]:
        check = kwargs.pop("check", False)
        kwargs.pop("capture_output", None)

        if self._keep_stdout:
            kwargs["stdout"] = subprocess.PIPE
            kwargs["stderr"] = subprocess.DEVNULL
        else:
            kwargs["stdout"] = subprocess.DEVNULL
            kwargs["stderr"] = subprocess.PIPE
        kwargs["text"] = True
        kwargs["bufsize"] = 1

        process = subprocess.Popen(*args, **kwargs)
        pipe = process.stdout if self._keep_stdout else process.stderr
        target = sys.stdout if self._keep_stdout else sys.stderr

        thread = Thread(
            target=stream_output,
            args=(pipe, target),
            name="stdout-streamer" if self._keep_stdout else "stderr-streamer",
        )
        thread.start()

        try:
            returncode = process.wait()
        except BaseException:
            # Interrupted while waiting: don't leave the child running
            process.kill()
            process.wait()
            raise
        finally:
            thread.join(timeout=self.JOIN_TIMEOUT_SECS)
            if pipe:
                pipe.close()

        if thread.is_alive():
            self._logger.warn(
                f"Stream thread did not complete within {self.JOIN_TIMEOUT_SECS} seconds"
            )

        command = args[0] if args else kwargs.get("args", [])
        if check and returncode != 0:
            raise subprocess.CalledProcessError(returncode, command)

        # Output was streamed, so nothing is captured
        return subprocess.CompletedProcess(args=command, returncode=returncode)


def make_process_runner(output: CommandOutput, logger: Logger) -> ProcessRunner:
    """
    Factory function for creating ProcessRunner instances.

    Raises:
        ValueError: If an invalid CommandOutput value is provided
    """
    match output:
        case CommandOutput.ALL:
            return PassthroughProcessRunner(logger)
        case CommandOutput.NONE:
            return SilentProcessRunner(logger)
        case CommandOutput.OUT:
            return StreamingProcessRunner(logger, keep_stdout=True)
        case CommandOutput.ERR:
            return StreamingProcessRunner(logger, keep_stdout=False)
        case _:
            raise ValueError(f"Invalid CommandOutput: {output}")
