"""Tests for pipeline construction and pipe ownership."""

import os
from unittest.mock import patch

import pytest

from pipeshell.directives import RedirectionSpec
from pipeshell.errors import ResourceExhausted
from pipeshell.pipeline import PipeEnd, allocate_pipes, build


def fd_is_open(fd: int) -> bool:
    try:
        os.fstat(fd)
    except OSError:
        return False
    return True


class TestPipeEnd:
    def test_close_is_idempotent(self):
        read_fd, write_fd = os.pipe()
        end = PipeEnd(read_fd)
        os.close(write_fd)

        end.close()
        end.close()

        assert end.closed
        assert not fd_is_open(read_fd)

    def test_fileno_after_close_raises(self):
        read_fd, write_fd = os.pipe()
        os.close(write_fd)
        end = PipeEnd(read_fd)
        end.close()

        with pytest.raises(ValueError):
            end.fileno()

    def test_detach_transfers_ownership(self):
        read_fd, write_fd = os.pipe()
        os.close(write_fd)
        end = PipeEnd(read_fd)

        fd = end.detach()
        end.close()

        assert fd == read_fd
        assert fd_is_open(fd)
        os.close(fd)

    def test_context_manager_closes(self):
        read_fd, write_fd = os.pipe()
        os.close(write_fd)

        with PipeEnd(read_fd) as end:
            assert end.fileno() == read_fd

        assert not fd_is_open(read_fd)


def test_single_segment_has_no_pipes():
    with build(["ls", "-l"], [], RedirectionSpec()) as pipeline:
        assert len(pipeline) == 1
        assert pipeline.pipes == []
        assert pipeline.segments[0].argv == ["ls", "-l"]


def test_segments_and_pipes_counts():
    with build(["yes", "head", "-n1", "cat"], [1, 3], RedirectionSpec()) as pipeline:
        assert [s.argv for s in pipeline.segments] == [["yes"], ["head", "-n1"], ["cat"]]
        assert [s.index for s in pipeline.segments] == [0, 1, 2]
        assert len(pipeline.pipes) == 2
        assert len(pipeline.descriptors()) == 4


def test_empty_segments_dropped():
    with build(["ls", "wc"], [0, 1, 1, 2], RedirectionSpec()) as pipeline:
        assert [s.argv for s in pipeline.segments] == [["ls"], ["wc"]]
        assert len(pipeline.pipes) == 1


def test_no_segments():
    pipeline = build([], [0], RedirectionSpec())

    assert pipeline.segments == []
    assert pipeline.pipes == []


def test_redirection_attached_to_boundary_segments():
    redirection = RedirectionSpec(input_file="in", output_file="out", append=True)

    with build(["cat", "sort", "uniq"], [1, 2], redirection) as pipeline:
        first, middle, last = pipeline.segments
        assert first.redirection == RedirectionSpec(input_file="in")
        assert middle.redirection == RedirectionSpec()
        assert last.redirection == RedirectionSpec(output_file="out", append=True)


def test_single_segment_gets_both_targets():
    redirection = RedirectionSpec(input_file="in", output_file="out")

    pipeline = build(["sort"], [], redirection)

    assert pipeline.segments[0].redirection == redirection


def test_close_releases_every_descriptor():
    pipeline = build(["a", "b", "c"], [1, 2], RedirectionSpec())
    fds = pipeline.descriptors()

    pipeline.close()

    assert pipeline.descriptors() == []
    assert not any(fd_is_open(fd) for fd in fds)


def test_allocation_failure_releases_earlier_pipes():
    real_pipe = os.pipe
    created = []

    def flaky_pipe():
        if len(created) == 2:
            raise OSError(24, "Too many open files")
        fds = real_pipe()
        created.extend(fds)
        return fds

    with patch("pipeshell.pipeline.os.pipe", side_effect=flaky_pipe):
        with pytest.raises(ResourceExhausted) as excinfo:
            allocate_pipes(3)

    assert "Too many open files" in str(excinfo.value)
    assert not any(fd_is_open(fd) for fd in created)
