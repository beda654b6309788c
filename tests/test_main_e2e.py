import io
import sys


def test_encode_decode_files_roundtrip(sample_file, tmp_path, no_progress, m):
    packed = tmp_path / "out.huf"
    restored = tmp_path / "restored.bin"

    assert m.main(["encode", str(sample_file), str(packed)]) == 0
    assert packed.exists() and packed.stat().st_size > 0
    assert no_progress

    assert m.main(["decode", str(packed), str(restored), "-P"]) == 0
    assert restored.read_bytes() == sample_file.read_bytes()


def test_encode_to_stdout_decode_from_stdin(sample_file, tmp_path, monkeypatch, m):
    out = io.BytesIO()
    monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(out))
    assert m.main(["e", str(sample_file), "-P"]) == 0
    packed = out.getvalue()
    assert packed

    restored = tmp_path / "restored.bin"
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(packed)))
    assert m.main(["d", "-", str(restored), "-P"]) == 0
    assert restored.read_bytes() == sample_file.read_bytes()


def test_empty_file_roundtrip(tmp_path, m):
    src = tmp_path / "empty"
    src.write_bytes(b"")
    packed = tmp_path / "empty.huf"
    restored = tmp_path / "empty.out"
    assert m.main(["encode", str(src), str(packed), "-P"]) == 0
    assert packed.read_bytes() == b""
    assert m.main(["decode", str(packed), str(restored), "-P"]) == 0
    assert restored.read_bytes() == b""


def test_stats_and_dump_go_to_stderr(sample_file, tmp_path, capsys, m):
    packed = tmp_path / "out.huf"
    assert m.main(["encode", str(sample_file), str(packed), "-P", "-s", "-d"]) == 0
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Compression ratio" in captured.err
    assert "'H'  count=21" in captured.err


def test_missing_input_reports_error(tmp_path, capsys, m):
    status = m.main(["encode", str(tmp_path / "nope.txt"), "-P"])
    assert status == 1
    assert "[!]" in capsys.readouterr().err


def test_corrupt_input_writes_nothing(sample_file, tmp_path, capsys, m):
    packed = tmp_path / "out.huf"
    assert m.main(["encode", str(sample_file), str(packed), "-P"]) == 0
    packed.write_bytes(packed.read_bytes()[:-3])

    restored = tmp_path / "restored.bin"
    assert m.main(["decode", str(packed), str(restored), "-P"]) == 1
    assert not restored.exists()
    assert "Invalid compressed data" in capsys.readouterr().err
