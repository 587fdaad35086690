import asyncio
import logging
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import aiofiles
from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import CleanupError, FileTooLargeError, TooManyFilesError
from app.services.job import ConversionJob, UploadedFile
from app.utils.file_validator import get_extension

logger = logging.getLogger(__name__)


class FileManager:
    """
    파일 관리자

    - 업로드 파일 스테이징 (작업 소유 경로에 저장)
    - 파일/디렉토리 삭제
    - 오래된 산출물 정리
    """

    CHUNK_SIZE = 1024 * 1024  # 1MB 청크

    def __init__(
        self,
        upload_dir: Optional[Path] = None,
        output_dir: Optional[Path] = None,
    ):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self.output_dir = output_dir or settings.OUTPUT_DIR

        # 디렉토리 생성
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    async def save_upload(
        self,
        job: ConversionJob,
        upload: UploadFile,
        index: int,
        max_size: Optional[int] = None,
    ) -> UploadedFile:
        """
        업로드 파일 저장

        저장 경로는 클라이언트 파일명이 아닌 job_id와 선언된 content type으로 결정한다.

        Args:
            job: 파일을 소유할 작업
            upload: 업로드 파일
            index: 작업 내 파일 순번
            max_size: 최대 크기 (bytes), None이면 설정값 사용

        Returns:
            UploadedFile

        Raises:
            FileTooLargeError: 파일 크기 초과
        """
        max_size = max_size or settings.MAX_FILE_SIZE_BYTES
        content_type = (upload.content_type or "application/octet-stream").split(";")[0]
        content_type = content_type.strip().lower()

        # 첫 바이트를 쓰기 전에 등록 (부분 파일도 정리 대상)
        save_path = job.input_path(index, get_extension(content_type))

        total_size = 0
        size_exceeded = False

        async with aiofiles.open(save_path, "wb") as f:
            while True:
                # 동기 read를 비동기로 실행
                chunk = await asyncio.to_thread(upload.file.read, self.CHUNK_SIZE)
                if not chunk:
                    break

                total_size += len(chunk)
                if total_size > max_size:
                    size_exceeded = True
                    break

                await f.write(chunk)

        if size_exceeded:
            save_path.unlink(missing_ok=True)
            raise FileTooLargeError(max_size // (1024 * 1024))

        return UploadedFile(
            path=save_path,
            content_type=content_type,
            original_name=upload.filename or "",
            size=total_size,
        )

    async def save_uploads_batch(
        self,
        job: ConversionJob,
        uploads: Sequence[UploadFile],
        max_files: Optional[int] = None,
        max_size: Optional[int] = None,
    ) -> List[UploadedFile]:
        """
        여러 파일 일괄 저장 (업로드 순서 유지)

        Raises:
            TooManyFilesError: 파일 개수 초과 (저장 전에 검사)
        """
        max_files = max_files or settings.MAX_IMAGE_FILES

        if len(uploads) > max_files:
            raise TooManyFilesError(max_files)

        results = []
        for index, upload in enumerate(uploads):
            results.append(await self.save_upload(job, upload, index, max_size))
        return results

    def delete_path(self, path: Path) -> bool:
        """
        파일 또는 디렉토리 삭제

        Returns:
            삭제 대상이 존재했으면 True

        Raises:
            CleanupError: 삭제 실패
        """
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
                return True
            if path.exists() or path.is_symlink():
                path.unlink()
                return True
            return False
        except OSError as e:
            raise CleanupError(path, e) from e

    def cleanup_old_files(
        self,
        max_age_minutes: int,
        skip: Optional[Callable[[Path], bool]] = None,
    ) -> int:
        """
        오래된 파일 정리

        Args:
            max_age_minutes: 최대 보관 시간 (분)
            skip: True를 반환하는 항목은 건너뜀 (진행 중인 작업 등)

        Returns:
            삭제된 항목 수
        """
        cutoff_time = datetime.now() - timedelta(minutes=max_age_minutes)
        deleted_count = 0

        for dir_path in (self.upload_dir, self.output_dir):
            if not dir_path.exists():
                continue

            for item in dir_path.iterdir():
                if skip and skip(item):
                    continue
                try:
                    mtime = datetime.fromtimestamp(item.stat().st_mtime)
                    if mtime < cutoff_time and self.delete_path(item):
                        deleted_count += 1
                except FileNotFoundError:
                    continue
                except OSError as e:
                    logger.warning(f"오래된 파일 정리 실패: {e}")

        return deleted_count
