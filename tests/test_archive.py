"""ZIP 생성 테스트"""

import zipfile

import pytest

from app.core.exceptions import ArchiveError
from app.services import build_zip


class TestBuildZip:
    def test_entries_at_root_in_page_order(self, tmp_path):
        pages = tmp_path / "pages"
        pages.mkdir()
        for number in (10, 2, 1):
            (pages / f"page-{number}.png").write_bytes(f"page {number}".encode())
        zip_path = tmp_path / "out.zip"

        count = build_zip(pages, zip_path)

        assert count == 3
        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == ["page-1.png", "page-2.png", "page-10.png"]
            assert zf.read("page-10.png") == b"page 10"

    def test_explicit_entry_order(self, tmp_path):
        pages = tmp_path / "pages"
        pages.mkdir()
        first, second = pages / "page-2.png", pages / "page-1.png"
        first.write_bytes(b"2")
        second.write_bytes(b"1")
        zip_path = tmp_path / "out.zip"

        build_zip(pages, zip_path, entries=[first, second])

        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == ["page-2.png", "page-1.png"]

    def test_empty_directory(self, tmp_path):
        pages = tmp_path / "pages"
        pages.mkdir()
        zip_path = tmp_path / "out.zip"

        assert build_zip(pages, zip_path) == 0
        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == []

    def test_missing_entry_is_archive_error(self, tmp_path):
        """부분적으로 쓰인 ZIP 파일은 남을 수 있음 (작업 정리 대상)"""
        zip_path = tmp_path / "out.zip"
        with pytest.raises(ArchiveError) as exc_info:
            build_zip(tmp_path, zip_path, entries=[tmp_path / "missing.png"])
        assert exc_info.value.status_code == 500

    def test_missing_source_directory(self, tmp_path):
        with pytest.raises(ArchiveError):
            build_zip(tmp_path / "nope", tmp_path / "out.zip")
