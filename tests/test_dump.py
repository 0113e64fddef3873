import io
import sys

import pytest

from iptables_diff.dump import DumpError, capture_dump, load_dump


def test_capture_dump_returns_stdout():
    text = capture_dump([sys.executable, "-c", "print('*filter'); print('COMMIT')"])
    assert text.splitlines() == ["*filter", "COMMIT"]


def test_capture_dump_failing_command():
    with pytest.raises(DumpError, match="status 3"):
        capture_dump([sys.executable, "-c", "import sys; sys.exit(3)"])


def test_capture_dump_missing_command():
    with pytest.raises(DumpError, match="cannot run"):
        capture_dump(["iptables-save-does-not-exist", "-c"])


def test_load_dump_from_file(tmp_path):
    path = tmp_path / "rules"
    path.write_text("*nat\nCOMMIT\n")
    assert load_dump(path) == "*nat\nCOMMIT\n"


def test_load_dump_from_stdin(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"*raw\nCOMMIT\n")))
    assert load_dump("-") == "*raw\nCOMMIT\n"


def test_load_dump_missing_file(tmp_path):
    with pytest.raises(DumpError):
        load_dump(tmp_path / "missing")


def test_load_dump_rejects_non_utf8_file(tmp_path):
    path = tmp_path / "latin1.rules"
    path.write_bytes(b'*filter\n:INPUT ACCEPT [0:0]\n[0:0] -A INPUT -m comment --comment "caf\xe9" -j ACCEPT\nCOMMIT\n')
    with pytest.raises(DumpError, match="not valid UTF-8"):
        load_dump(path)


def test_load_dump_reads_utf8_file(tmp_path):
    path = tmp_path / "utf8.rules"
    path.write_bytes('[0:0] -A INPUT -m comment --comment "café" -j ACCEPT\n'.encode("utf-8"))
    assert "café" in load_dump(path)


def test_capture_dump_rejects_non_utf8_output():
    with pytest.raises(DumpError, match="not valid UTF-8"):
        capture_dump([sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'\\xe9')"])
