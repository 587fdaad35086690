import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence, Type

from app.core.exceptions import ConversionError
from app.services.job import ConversionJob, UploadedFile

logger = logging.getLogger(__name__)


class BaseConverter(ABC):
    """변환기 추상 베이스 클래스"""

    # 예상하지 못한 예외를 변환할 에러 타입
    error_class: Type[ConversionError] = ConversionError

    @property
    @abstractmethod
    def output_extension(self) -> str:
        """출력 파일 확장자 (예: '.pdf')"""
        pass

    @property
    @abstractmethod
    def mode(self) -> str:
        """변환 모드 (예: 'images-to-pdf')"""
        pass

    @abstractmethod
    def _convert_sync(
        self,
        job: ConversionJob,
        inputs: Sequence[UploadedFile],
        output_path: Path,
    ) -> None:
        """동기 변환 실행 (서브클래스에서 구현)"""
        pass

    async def convert(
        self, job: ConversionJob, inputs: Sequence[UploadedFile]
    ) -> Path:
        """
        비동기 변환 실행 (블로킹 작업은 스레드에서)

        요청이 취소되면 스레드 작업이 끝난 뒤에 CancelledError를 전파한다.

        Args:
            job: 변환 작업 (출력 경로 할당 및 소유)
            inputs: 스테이징된 입력 파일

        Returns:
            출력 파일 경로
        """
        output_path = job.output_file(self.output_extension)
        worker = asyncio.ensure_future(
            asyncio.to_thread(self._convert_sync, job, inputs, output_path)
        )

        try:
            await asyncio.shield(worker)
        except asyncio.CancelledError:
            # 스레드는 중단되지 않으므로 끝날 때까지 기다린 뒤 정리로 넘김
            await self._wait_worker(worker)
            logger.info(f"변환 취소 (job_id={job.job_id}, mode={self.mode})")
            raise
        except ConversionError:
            raise
        except Exception as e:
            logger.exception(f"변환 중 오류 발생 (job_id={job.job_id}, mode={self.mode})")
            raise self.error_class() from e

        if not output_path.exists():
            raise self.error_class()

        job.output_path = output_path
        return output_path

    @staticmethod
    async def _wait_worker(worker: asyncio.Future) -> None:
        while not worker.done():
            try:
                await asyncio.wait({worker})
            except asyncio.CancelledError:
                continue
        if not worker.cancelled():
            # 취소된 요청의 결과/예외는 버림
            worker.exception()
