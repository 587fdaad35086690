"""업로드 스테이징 테스트"""

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.core.exceptions import CleanupError, FileTooLargeError, TooManyFilesError


def _upload(data: bytes, filename: str, content_type: str) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.mark.asyncio
class TestSaveUpload:
    async def test_saved_under_job_namespace(self, workspace):
        job = workspace.create_job("pdf-to-images")

        uploaded = await workspace.file_manager.save_upload(
            job, _upload(b"%PDF-1.7 data", "../../etc/passwd", "application/pdf"), index=0
        )

        assert uploaded.path == workspace.upload_dir / f"{job.job_id}_00.pdf"
        assert uploaded.path.read_bytes() == b"%PDF-1.7 data"
        assert uploaded.content_type == "application/pdf"
        assert uploaded.original_name == "../../etc/passwd"
        assert uploaded.size == 13
        assert uploaded.path in job.owned_paths

    async def test_content_type_parameters_stripped(self, workspace):
        job = workspace.create_job("images-to-pdf")
        uploaded = await workspace.file_manager.save_upload(
            job, _upload(b"x", "a.png", "Image/PNG; charset=binary"), index=3
        )
        assert uploaded.content_type == "image/png"
        assert uploaded.path.name == f"{job.job_id}_03.png"

    async def test_too_large_removed(self, workspace):
        job = workspace.create_job("images-to-pdf")
        max_size = 1024 * 1024

        with pytest.raises(FileTooLargeError) as exc_info:
            await workspace.file_manager.save_upload(
                job, _upload(b"x" * (max_size + 1), "a.png", "image/png"), 0, max_size=max_size
            )

        assert exc_info.value.status_code == 413
        assert exc_info.value.detail == "File too large (max 1MB)"
        assert list(workspace.upload_dir.iterdir()) == []
        # 부분 파일 경로는 정리 대상으로 남음
        assert job.owned_paths == [workspace.upload_dir / f"{job.job_id}_00.png"]

    async def test_too_many_files_rejected_before_staging(self, workspace):
        job = workspace.create_job("images-to-pdf")
        uploads = [_upload(b"x", f"{n}.png", "image/png") for n in range(3)]

        with pytest.raises(TooManyFilesError) as exc_info:
            await workspace.file_manager.save_uploads_batch(job, uploads, max_files=2)

        assert exc_info.value.detail == "Too many files (max 2)"
        assert list(workspace.upload_dir.iterdir()) == []

    async def test_batch_keeps_upload_order(self, workspace):
        job = workspace.create_job("images-to-pdf")
        uploads = [_upload(b"x", name, "image/png") for name in ("b.png", "a.png")]

        staged = await workspace.file_manager.save_uploads_batch(job, uploads)

        assert [f.original_name for f in staged] == ["b.png", "a.png"]
        assert [f.path.name for f in staged] == [
            f"{job.job_id}_00.png",
            f"{job.job_id}_01.png",
        ]


class TestDeletePath:
    def test_file_and_directory(self, workspace, tmp_path):
        file_path = tmp_path / "f.txt"
        file_path.write_text("x")
        dir_path = tmp_path / "d"
        (dir_path / "sub").mkdir(parents=True)
        (dir_path / "sub" / "f.txt").write_text("x")

        assert workspace.file_manager.delete_path(file_path) is True
        assert workspace.file_manager.delete_path(dir_path) is True
        assert not file_path.exists()
        assert not dir_path.exists()

    def test_missing_path(self, workspace, tmp_path):
        assert workspace.file_manager.delete_path(tmp_path / "missing") is False

    def test_failure_raises_cleanup_error(self, workspace, tmp_path, monkeypatch):
        file_path = tmp_path / "f.txt"
        file_path.write_text("x")

        def deny(self, missing_ok=False):
            raise PermissionError("denied")

        monkeypatch.setattr(type(file_path), "unlink", deny)

        with pytest.raises(CleanupError):
            workspace.file_manager.delete_path(file_path)
