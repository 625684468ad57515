"""Exception taxonomy for the command-line engine.

Parsing errors (MalformedDirective, ResourceExhausted) abort a single
sub-command and are reported by the sequencer. File, program and execution
errors are raised inside a child process after fork and turned into a
non-zero exit status there. SpawnFailure is reported by the launcher when
fork itself fails.
"""


class PipeshellError(Exception):
    """Base class for all interpreter errors."""

    pass


class EmptyInput(PipeshellError):
    """Raised when a line contains no sub-commands at all.

    Callers should treat this as "nothing to do" rather than a failure.
    """

    pass


class MalformedDirective(PipeshellError):
    """Raised when a redirection or pipe operator is missing its operand."""

    pass


class MissingRedirectTarget(MalformedDirective):
    """Raised when `<`, `>` or `>>` is not followed by a file name."""

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"missing file name after '{operator}'")


class ResourceExhausted(PipeshellError):
    """Raised when the pipes for a pipeline cannot be allocated."""

    pass


class FileUnavailable(PipeshellError):
    """Raised when a redirection target cannot be opened."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class InputFileUnavailable(FileUnavailable):
    pass


class OutputFileUnavailable(FileUnavailable):
    pass


class ProgramNotFound(PipeshellError):
    """Raised when the program cannot be found on the search path."""

    def __init__(self, program: str):
        self.program = program
        super().__init__("command not found")


class ExecutionFailure(PipeshellError):
    """Raised when the program exists but could not be executed."""

    pass


class SpawnFailure(PipeshellError):
    """Raised when a child process cannot be created."""

    pass
