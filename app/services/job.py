import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from app.models import ConversionMode, ImageFormat, JobStatus

# 허용되는 상태 전이
_TRANSITIONS: Dict[JobStatus, Tuple[JobStatus, ...]] = {
    "created": ("in_progress", "failed"),
    "in_progress": ("completed", "failed"),
    "completed": ("cleaned",),
    "failed": ("cleaned",),
    "cleaned": (),
}


@dataclass(frozen=True)
class UploadedFile:
    """스테이징된 업로드 파일"""

    path: Path
    content_type: str
    original_name: str
    size: int


@dataclass
class ConversionJob:
    """
    변환 작업 (요청 하나당 하나)

    작업이 만드는 모든 경로는 job_id로 시작하며,
    사용 전에 claim()으로 등록되어 정리 대상이 된다.
    """

    job_id: str
    mode: ConversionMode
    upload_dir: Path
    output_dir: Path
    status: JobStatus = "created"
    output_path: Optional[Path] = None
    output_format: Optional[ImageFormat] = None
    error: Optional[str] = None
    owned_paths: List[Path] = field(default_factory=list)

    @classmethod
    def new(
        cls, mode: ConversionMode, upload_dir: Path, output_dir: Path
    ) -> "ConversionJob":
        """랜덤 ID로 새 작업 생성 (시간 기반 ID 사용 금지)"""
        return cls(
            job_id=uuid.uuid4().hex,
            mode=mode,
            upload_dir=upload_dir,
            output_dir=output_dir,
        )

    def claim(self, path: Path) -> Path:
        """
        경로를 이 작업 소유로 등록

        Raises:
            RuntimeError: 이미 실패/정리된 작업 (정리 후 새 경로가 생기지 않도록)
        """
        if self.status in ("failed", "cleaned"):
            raise RuntimeError(f"종료된 작업에 경로 등록 불가: {self.status} ({path.name})")
        if path not in self.owned_paths:
            self.owned_paths.append(path)
        return path

    def input_path(self, index: int, extension: str) -> Path:
        """업로드 저장 경로"""
        return self.claim(self.upload_dir / f"{self.job_id}_{index:02d}{extension}")

    def output_file(self, extension: str) -> Path:
        """최종 산출물 경로"""
        return self.claim(self.output_dir / f"{self.job_id}{extension}")

    def pages_dir(self) -> Path:
        """페이지 이미지용 빈 디렉토리 생성"""
        path = self.claim(self.output_dir / self.job_id)
        path.mkdir(parents=True, exist_ok=False)
        return path

    def owns(self, name: str) -> bool:
        """파일/디렉토리 이름이 이 작업의 네임스페이스에 속하는지"""
        return name.startswith(self.job_id)

    def transition(self, status: JobStatus) -> None:
        """
        상태 전이

        Raises:
            ValueError: 허용되지 않는 전이
        """
        if status not in _TRANSITIONS[self.status]:
            raise ValueError(f"잘못된 상태 전이: {self.status} -> {status}")
        self.status = status
