from pathlib import Path
from typing import Optional

from app.models import ImageFormat

# 파일 시그니처 (매직 바이트)
FILE_SIGNATURES = {
    "pdf": [b"%PDF"],
    "jpeg": [b"\xff\xd8\xff"],
    "png": [b"\x89PNG\r\n\x1a\n"],
}

# 업로드 저장시 사용할 확장자 (content type 기준)
EXTENSIONS = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/png": ".png",
}


def has_signature(header: bytes, kind: str) -> bool:
    """
    바이트 헤더가 해당 형식의 시그니처로 시작하는지 확인

    Args:
        header: 파일 앞부분 바이트
        kind: 'pdf', 'jpeg', 'png'

    Returns:
        시그니처가 일치하면 True
    """
    return any(header.startswith(sig) for sig in FILE_SIGNATURES.get(kind, []))


def validate_file_signature(file_path: Path, kind: str) -> bool:
    """
    파일 시그니처(매직 바이트) 검증

    Args:
        file_path: 검증할 파일 경로
        kind: 예상 형식 (예: 'pdf')

    Returns:
        시그니처가 유효하면 True
    """
    try:
        with open(file_path, "rb") as f:
            header = f.read(16)
    except (IOError, OSError):
        return False

    return has_signature(header, kind)


def detect_image_format(data: bytes) -> Optional[ImageFormat]:
    """이미지 바이트의 실제 형식 (jpeg/png), 알 수 없으면 None"""
    for kind in ("jpeg", "png"):
        if has_signature(data, kind):
            return kind
    return None


def get_extension(content_type: str) -> str:
    """content type에 해당하는 저장 확장자 반환"""
    return EXTENSIONS.get(content_type.split(";")[0].strip().lower(), ".bin")
