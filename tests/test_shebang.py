"""Tests for recognizing Python scripts by their shebang line."""

import os
import sys

import pytest

from envrun.services import shebang
from envrun.services.shebang import ShebangSniffer, python_shebangs


@pytest.mark.parametrize(
    "first_line",
    [
        "#!/usr/bin/env python\n",
        "#!/usr/bin/env python3\n",
        f"#!{sys.executable}\n",
    ],
)
def test_matches_python_shebangs(make_script, first_line):
    path = make_script("tool", first_line + "print('hi')\n")
    assert ShebangSniffer().matches(path)


@pytest.mark.parametrize(
    "content",
    [
        "#!/bin/sh\necho hi\n",
        "#!/usr/bin/env python3.11\n",
        "#!/usr/bin/env ruby\n",
        "print('no shebang')\n",
        " #!/usr/bin/env python\n",
    ],
)
def test_rejects_other_files(make_script, content):
    assert not ShebangSniffer().matches(make_script("tool", content))


def test_short_and_empty_files(make_script):
    sniffer = ShebangSniffer()
    assert not sniffer.matches(make_script("short", "#!"))
    assert not sniffer.matches(make_script("empty", ""))


def test_unreadable_path_is_not_a_match(tmp_path):
    assert not ShebangSniffer().matches(str(tmp_path))
    assert not ShebangSniffer().matches(str(tmp_path / "missing"))


def test_probe_length_is_longest_pattern():
    patterns = python_shebangs("/opt/python/bin/python3.12")
    sniffer = ShebangSniffer(patterns)
    assert sniffer.probe_length == len(b"#!/opt/python/bin/python3.12\n")


def test_reads_at_most_probe_length_and_closes(make_script, monkeypatch):
    path = make_script("tool", "#!/usr/bin/env python\n" + "x" * 10_000)
    handles = []
    real_open = open

    class SpyHandle:
        def __init__(self, handle):
            self._handle = handle
            self.sizes = []

        def read(self, size=-1):
            self.sizes.append(size)
            return self._handle.read(size)

        @property
        def closed(self):
            return self._handle.closed

        def __enter__(self):
            return self

        def __exit__(self, *exc_info):
            self._handle.close()

    def spy_open(*args, **kwargs):
        handle = SpyHandle(real_open(*args, **kwargs))
        handles.append(handle)
        return handle

    monkeypatch.setattr(shebang, "open", spy_open, raising=False)
    sniffer = ShebangSniffer()

    assert sniffer.matches(path)
    assert len(handles) == 1
    assert handles[0].sizes == [sniffer.probe_length]
    assert handles[0].closed


@pytest.mark.skipif(not os.path.isdir("/proc/self/fd"), reason="needs /proc")
def test_does_not_leak_descriptors(make_script):
    path = make_script("tool", "#!/usr/bin/env python\n")
    sniffer = ShebangSniffer()
    before = len(os.listdir("/proc/self/fd"))
    for _ in range(20):
        sniffer.matches(path)
    assert len(os.listdir("/proc/self/fd")) == before
