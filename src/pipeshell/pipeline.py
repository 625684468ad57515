"""Pipeline construction.

A pipeline is the ordered list of segments of one sub-command plus the
anonymous pipes that connect consecutive segments. Pipe descriptors are
wrapped in PipeEnd objects owned by the Pipeline, so closing the pipeline
(or leaving its ``with`` block) releases every descriptor it still holds.
"""

import logging
import os
from dataclasses import dataclass, field

from pipeshell.directives import RedirectionSpec
from pipeshell.errors import ResourceExhausted

logger = logging.getLogger(__name__)


class PipeEnd:
    """One end of an anonymous pipe.

    The descriptor is owned by this object until it is closed or detached.
    """

    def __init__(self, fd: int):
        self._fd: int | None = fd

    def fileno(self) -> int:
        if self._fd is None:
            raise ValueError("I/O operation on closed pipe end")
        return self._fd

    @property
    def closed(self) -> bool:
        return self._fd is None

    def close(self) -> None:
        """Close the descriptor. Closing twice is a no-op."""
        fd, self._fd = self._fd, None
        if fd is not None:
            os.close(fd)

    def detach(self) -> int:
        """Give up ownership and return the raw descriptor."""
        fd = self.fileno()
        self._fd = None
        return fd

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self):
        state = "closed" if self._fd is None else f"fd={self._fd}"
        return f"PipeEnd({state})"


@dataclass
class PipePair:
    read: PipeEnd
    write: PipeEnd

    def close(self) -> None:
        try:
            self.read.close()
        finally:
            self.write.close()


@dataclass
class Segment:
    """One program invocation within a pipeline.

    The redirection only carries the input target on the first segment and
    the output target on the last one.
    """

    index: int
    argv: list[str]
    redirection: RedirectionSpec = field(default_factory=RedirectionSpec)

    @property
    def program(self) -> str:
        return self.argv[0]


@dataclass
class Pipeline:
    segments: list[Segment]
    pipes: list[PipePair] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.segments)

    def is_last(self, segment: Segment) -> bool:
        return segment.index == len(self.segments) - 1

    def descriptors(self) -> list[int]:
        """Raw descriptors of every pipe end that is still open."""
        return [end.fileno() for pair in self.pipes for end in (pair.read, pair.write) if not end.closed]

    def close(self) -> None:
        """Close every pipe end still owned by the pipeline."""
        for pair in self.pipes:
            pair.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def allocate_pipes(count: int) -> list[PipePair]:
    """Allocate a batch of pipes.

    Either every pipe is allocated or none is: on failure the pipes created
    so far are closed before ResourceExhausted is raised.
    """
    pipes: list[PipePair] = []
    try:
        for _ in range(count):
            read_fd, write_fd = os.pipe()
            pipes.append(PipePair(PipeEnd(read_fd), PipeEnd(write_fd)))
    except OSError as e:
        logger.error(f"Pipe allocation failed after {len(pipes)} of {count} pipes: {e}")
        for pair in pipes:
            pair.close()
        raise ResourceExhausted(f"cannot create pipe: {e.strerror or e}") from e
    return pipes


def build(arguments: list[str], split_points: list[int], redirection: RedirectionSpec) -> Pipeline:
    """Partition clean arguments into segments and connect them with pipes.

    Empty pieces (from leading, trailing or doubled '|') are dropped.

    Args:
        arguments: Argument tokens with all operators removed
        split_points: Indexes into arguments where a new segment starts
        redirection: Redirection targets of the whole sub-command

    Returns:
        Pipeline with N segments and N-1 pipes

    Raises:
        ResourceExhausted: If the pipes cannot be allocated
    """
    pieces: list[list[str]] = []
    start = 0
    for point in (*split_points, len(arguments)):
        piece = arguments[start:point]
        if piece:
            pieces.append(piece)
        start = point

    segments = [Segment(index=i, argv=piece) for i, piece in enumerate(pieces)]
    if segments:
        segments[0].redirection.input_file = redirection.input_file
        segments[-1].redirection.output_file = redirection.output_file
        segments[-1].redirection.append = redirection.append

    pipes = allocate_pipes(max(len(segments) - 1, 0))
    logger.debug(f"Built pipeline with {len(segments)} segments and {len(pipes)} pipes")
    return Pipeline(segments=segments, pipes=pipes)
