"""
Tests for bounded file reads, listings and writes.
"""

import errno

import pytest

from qalens.config_loader import MAX_FILE_SIZE
from qalens.errors import FileAccessFailed, NotFound, TooLarge
from qalens.file_access import FileAccessService, mime_type_for


@pytest.fixture
def files():
    return FileAccessService()


def _sparse_file(path, size):
    with open(path, "wb") as f:
        f.truncate(size)
    return path


class TestRead:
    def test_ok(self, files, tmp_path):
        p = tmp_path / "r.json"
        p.write_text('{"a": 1}', encoding="utf-8")
        result = files.read(p, locator="qa://cypress/r.json")
        assert result.ok
        assert result.content == '{"a": 1}'
        assert result.size == 8
        assert result.mime_type == "application/json"

    def test_not_found_carries_locator_and_path(self, files, tmp_path):
        p = tmp_path / "missing.json"
        result = files.read(p, locator="qa://cypress/missing.json")
        assert result.status == "not_found"
        assert result.content is None
        with pytest.raises(NotFound) as exc_info:
            result.raise_for_status()
        assert str(exc_info.value) == "Resource not found: qa://cypress/missing.json"
        assert exc_info.value.to_payload()["expectedPath"] == str(p)

    def test_directory_is_not_found(self, files, tmp_path):
        assert files.read(tmp_path).status == "not_found"

    def test_undecodable_bytes_replaced(self, files, tmp_path):
        p = tmp_path / "bin.txt"
        p.write_bytes(b"ok \xff\xfe end")
        result = files.read(p)
        assert result.ok
        assert result.content.startswith("ok ")
        assert "�" in result.content


class TestOsFailures:
    """OS refusals surface as FileAccessFailed without the absolute path."""

    def test_read_io_error(self, files, tmp_path, monkeypatch):
        p = tmp_path / "r.json"
        p.write_text("{}", encoding="utf-8")

        def broken_read(self, *args, **kwargs):
            raise OSError(errno.EIO, "Input/output error", str(self))

        monkeypatch.setattr(type(p), "read_text", broken_read)
        with pytest.raises(FileAccessFailed) as exc_info:
            files.read(p, locator="qa://cypress/r.json")
        payload = exc_info.value.to_payload()
        assert payload["code"] == "WA-FILE-E-001"
        assert payload["error"] == "Cannot read qa://cypress/r.json: Input/output error"
        assert str(tmp_path) not in payload["error"]

    def test_overlong_name_never_raises_oserror(self, files, tmp_path):
        result = None
        try:
            result = files.read(tmp_path / ("a" * 300), locator="qa://cypress/long")
        except FileAccessFailed as e:
            assert e.code == "WA-FILE-E-001"
        if result is not None:
            assert result.status == "not_found"

    def test_list_permission_error(self, files, tmp_path, monkeypatch):
        def denied(self):
            raise PermissionError(errno.EACCES, "Permission denied", str(self))

        monkeypatch.setattr(type(tmp_path), "iterdir", denied)
        with pytest.raises(FileAccessFailed) as exc_info:
            files.list_directory(tmp_path)
        assert "Permission denied" in str(exc_info.value)

    def test_write_under_a_file_fails(self, files, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(FileAccessFailed) as exc_info:
            files.write_text(blocker / "x.spec.js", "x", locator="qa://playwright-tests/blocker/x.spec.js")
        assert str(exc_info.value).startswith("Cannot write qa://playwright-tests/blocker/x.spec.js: ")


class TestSizeCeiling:
    """The ceiling is 10 MiB and inclusive."""

    def test_exactly_ceiling_allowed(self, files, tmp_path):
        p = _sparse_file(tmp_path / "exact.log", MAX_FILE_SIZE)
        result = files.read(p)
        assert result.ok
        assert result.size == 10 * 1024 * 1024

    def test_one_byte_over_rejected(self, files, tmp_path):
        p = _sparse_file(tmp_path / "big.log", MAX_FILE_SIZE + 1)
        result = files.read(p)
        assert result.status == "too_large"
        assert result.size == MAX_FILE_SIZE + 1
        assert result.content is None

    def test_too_large_error(self, files, tmp_path):
        p = _sparse_file(tmp_path / "big.log", MAX_FILE_SIZE + 1)
        with pytest.raises(TooLarge) as exc_info:
            files.read(p).raise_for_status()
        payload = exc_info.value.to_payload()
        assert payload["code"] == "EN-READ-D-001"
        assert payload["size"] == MAX_FILE_SIZE + 1
        assert payload["maxSize"] == MAX_FILE_SIZE
        assert "(max: 10MB)" in payload["error"]

    def test_custom_ceiling(self, tmp_path):
        p = tmp_path / "small.txt"
        p.write_text("12345", encoding="utf-8")
        assert FileAccessService(max_size=4).read(p).status == "too_large"
        assert FileAccessService(max_size=5).read(p).ok


class TestListAndWrite:
    def test_list_sorted(self, files, tmp_path):
        for name in ("b.json", "a.json", "c"):
            (tmp_path / name).write_text("", encoding="utf-8")
        assert files.list_directory(tmp_path) == ["a.json", "b.json", "c"]

    def test_list_missing_directory_empty(self, files, tmp_path):
        assert files.list_directory(tmp_path / "nope") == []

    def test_write_creates_parents(self, files, tmp_path):
        target = tmp_path / "a" / "b" / "t.spec.js"
        size = files.write_text(target, "test('x', () => {});")
        assert target.read_text(encoding="utf-8") == "test('x', () => {});"
        assert size == len("test('x', () => {});")

    def test_write_over_ceiling_refused(self, tmp_path):
        with pytest.raises(TooLarge):
            FileAccessService(max_size=3).write_text(tmp_path / "x.js", "abcd")
        assert not (tmp_path / "x.js").exists()


class TestMimeTypes:
    @pytest.mark.parametrize("name,expected", [
        ("r.json", "application/json"),
        ("index.html", "text/html"),
        ("a.yml", "text/yaml"),
        ("a.yaml", "text/yaml"),
        ("out.txt", "text/plain"),
        ("junit.xml", "application/xml"),
        ("t.spec.js", "application/javascript"),
        ("s.css", "text/css"),
        ("README.md", "text/markdown"),
        ("trace.zip", "application/octet-stream"),
        ("noext", "application/octet-stream"),
    ])
    def test_extension_table(self, name, expected):
        assert mime_type_for(name) == expected
