import io

import pytest

from slpstream.reader import BufferSource, FileSource, SourceError, StreamSource, UnsupportedSourceError, get_source


def test_get_source_dispatch(tmp_path):
    path = tmp_path / "a.slp"
    path.write_bytes(b"abc")

    assert isinstance(get_source(str(path)), FileSource)
    assert isinstance(get_source(path), FileSource)
    assert isinstance(get_source(b"abc"), BufferSource)
    assert isinstance(get_source(memoryview(b"abc")), BufferSource)
    assert isinstance(get_source(io.BytesIO(b"abc")), StreamSource)

    source = BufferSource(b"abc")
    assert get_source(source) is source


def test_get_source_rejects_other_objects():
    with pytest.raises(UnsupportedSourceError):
        get_source(["not", "a", "replay"])


def test_missing_file(tmp_path):
    with pytest.raises(SourceError) as exc_info:
        FileSource(tmp_path / "missing.slp")
    assert exc_info.value.filename.endswith("missing.slp")


def test_file_reads_see_appended_data(tmp_path):
    path = tmp_path / "live.slp"
    path.write_bytes(b"")
    source = FileSource(path)
    assert source.read_all() == b""

    path.write_bytes(b"hello")
    assert source.read_all() == b"hello"
    assert source.length() == 5
    assert source.read(1, 10) == b"ello"


def test_stream_source():
    source = StreamSource(io.BytesIO(b"hello"))
    assert source.length() == 5
    assert source.read_all() == b"hello"
    assert source.read(3, 2) == b"lo"
    assert source.path is None
