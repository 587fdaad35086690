import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable, Dict, List, Optional

from fastapi.responses import FileResponse

from app.core.exceptions import CleanupError, ConversionError
from app.models import ConversionMode
from app.services.file_manager import FileManager
from app.services.job import ConversionJob

logger = logging.getLogger(__name__)


class JobFileResponse(FileResponse):
    """응답 전송이 끝나거나 중단되면 on_complete를 호출하는 FileResponse"""

    def __init__(self, path: Path, *, on_complete: Callable[[], None], **kwargs):
        super().__init__(path, **kwargs)
        self._on_complete = on_complete

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            # 클라이언트 연결 끊김/취소에도 실행 (디렉토리 삭제는 이벤트 루프 밖에서)
            await asyncio.to_thread(self._on_complete)


class JobWorkspaceManager:
    """
    작업 워크스페이스 관리자

    - 작업 생성 및 상태 전이 (created → in_progress → completed/failed → cleaned)
    - 작업 소유 경로 일괄 정리 (작업당 정확히 한 번)
    - 진행 중인 작업 레지스트리
    - 남은 산출물 주기적 정리
    """

    def __init__(
        self,
        upload_dir: Path,
        output_dir: Path,
        file_manager: Optional[FileManager] = None,
        stale_after_minutes: int = 60,
    ):
        self.upload_dir = upload_dir
        self.output_dir = output_dir
        self.file_manager = file_manager or FileManager(upload_dir, output_dir)
        self.stale_after_minutes = stale_after_minutes

        self._jobs: Dict[str, ConversionJob] = {}
        self._lock = threading.Lock()
        self._sweep_task: Optional[asyncio.Task] = None

    def create_job(self, mode: ConversionMode) -> ConversionJob:
        """새 작업 생성 (I/O 없음)"""
        job = ConversionJob.new(mode, self.upload_dir, self.output_dir)

        with self._lock:
            self._jobs[job.job_id] = job

        logger.debug(f"작업 생성 (job_id={job.job_id}, mode={mode})")
        return job

    def active_jobs(self) -> List[ConversionJob]:
        """정리되지 않은 작업 목록"""
        with self._lock:
            return list(self._jobs.values())

    def start(self, job: ConversionJob) -> None:
        """입력 스테이징 시작"""
        with self._lock:
            job.transition("in_progress")

    def fail(self, job: ConversionJob, error: BaseException) -> None:
        """작업 실패 처리 (이미 종료된 작업은 무시)"""
        with self._lock:
            if job.status not in ("created", "in_progress"):
                return
            job.transition("failed")
            job.error = getattr(error, "detail", None) or str(error) or type(error).__name__

        if isinstance(error, ConversionError) and error.status_code < 500:
            logger.warning(f"작업 거부 (job_id={job.job_id}): {job.error}")
        elif isinstance(error, asyncio.CancelledError):
            logger.info(f"작업 취소 (job_id={job.job_id})")
        else:
            logger.error(
                f"작업 실패 (job_id={job.job_id}): {job.error}",
                exc_info=(type(error), error, error.__traceback__),
            )

    def cleanup(self, job: ConversionJob) -> None:
        """
        작업 소유 경로 전체 삭제

        각 경로는 독립적으로 삭제하며, 하나가 실패해도 나머지는 계속 시도한다.
        두 번째 호출부터는 아무 것도 하지 않는다.
        """
        with self._lock:
            if job.status == "cleaned":
                return
            if job.status in ("created", "in_progress"):
                job.transition("failed")
            job.transition("cleaned")
            self._jobs.pop(job.job_id, None)
            paths = list(reversed(job.owned_paths))

        for path in paths:
            try:
                self.file_manager.delete_path(path)
            except CleanupError as e:
                logger.warning(f"{e} (job_id={job.job_id})")

        logger.debug(f"작업 정리 완료 (job_id={job.job_id}, paths={len(paths)})")

    @asynccontextmanager
    async def open_job(self, mode: ConversionMode) -> AsyncIterator[ConversionJob]:
        """
        작업 스코프

        블록 안에서 예외가 나면 실패 처리 후 즉시 정리한다.
        respond()로 응답에 넘겨진 작업은 응답 전송 후 정리된다.
        """
        job = self.create_job(mode)
        try:
            yield job
        except BaseException as e:
            self.fail(job, e)
            raise
        finally:
            if job.status != "completed":
                self.cleanup(job)

    def respond(
        self,
        job: ConversionJob,
        path: Path,
        filename: str,
        media_type: str,
    ) -> JobFileResponse:
        """완료 처리 후 산출물을 응답 스트림에 넘김"""
        with self._lock:
            job.output_path = path
            job.transition("completed")

        logger.info(f"작업 완료 (job_id={job.job_id}, mode={job.mode})")
        return JobFileResponse(
            path,
            on_complete=lambda: self.cleanup(job),
            filename=filename,
            media_type=media_type,
        )

    def cleanup_all(self) -> int:
        """진행 중인 모든 작업 정리 (종료시)"""
        jobs = self.active_jobs()
        for job in jobs:
            self.cleanup(job)
        return len(jobs)

    def _belongs_to_active_job(self, path: Path) -> bool:
        return any(job.owns(path.name) for job in self.active_jobs())

    def sweep_stale(self) -> int:
        """
        오래된 산출물 정리 (비정상 종료 등으로 남은 파일)

        Returns:
            삭제된 항목 수
        """
        return self.file_manager.cleanup_old_files(
            self.stale_after_minutes, skip=self._belongs_to_active_job
        )

    async def start_sweeper(self, interval_minutes: int = 10) -> None:
        """
        주기적 정리 스케줄러 시작

        Args:
            interval_minutes: 정리 간격 (분)
        """
        async def sweep_loop():
            while True:
                await asyncio.sleep(interval_minutes * 60)
                try:
                    count = await asyncio.to_thread(self.sweep_stale)
                except OSError as e:
                    logger.warning(f"산출물 정리 실패: {e}")
                    continue
                if count > 0:
                    logger.info(f"{count}개 남은 산출물 삭제됨")

        self._sweep_task = asyncio.create_task(sweep_loop())

    def stop_sweeper(self) -> None:
        """정리 스케줄러 중지"""
        if self._sweep_task:
            self._sweep_task.cancel()
            self._sweep_task = None
