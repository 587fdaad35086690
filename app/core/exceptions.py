from fastapi import HTTPException, status


class ConversionError(HTTPException):
    """변환 작업 기본 예외 (클라이언트 응답: {"error": detail})"""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "Internal server error",
    ):
        super().__init__(status_code=status_code, detail=detail)


class NoInputError(ConversionError):
    """업로드된 파일이 없음"""

    def __init__(self, message: str = "No images uploaded"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class UnsupportedTypeError(ConversionError):
    """지원하지 않는 content type (스테이징 전에 거부)"""

    def __init__(self, message: str = "Only PDF files allowed"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class TooManyFilesError(ConversionError):
    """파일 개수 초과"""

    def __init__(self, max_files: int):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many files (max {max_files})",
        )


class InvalidFormatError(ConversionError):
    """잘못된 출력 이미지 포맷"""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid format (use jpg or png)",
        )


class FileTooLargeError(ConversionError):
    """파일 크기 초과"""

    def __init__(self, max_size_mb: int):
        super().__init__(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large (max {max_size_mb}MB)",
        )


class InvalidDocumentError(ConversionError):
    """페이지 수를 읽을 수 없는 PDF"""

    def __init__(self, message: str = "Invalid PDF"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class DocumentTooLargeError(ConversionError):
    """페이지 수 상한 초과"""

    def __init__(self, max_pages: int):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"PDF too large (max {max_pages} pages)",
        )


class AssemblyError(ConversionError):
    """이미지 → PDF 조립 실패"""

    def __init__(self, message: str = "Image to PDF failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message
        )


class RenderError(ConversionError):
    """PDF → 이미지 래스터화 실패"""

    def __init__(self, message: str = "Conversion failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message
        )


class ArchiveError(ConversionError):
    """ZIP 생성 실패"""

    def __init__(self, message: str = "Archive creation failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message
        )


class CleanupError(OSError):
    """산출물 삭제 실패 (로그만 남기고 클라이언트에 노출하지 않음)"""

    def __init__(self, path, cause: OSError):
        super().__init__(f"산출물 삭제 실패: {path} ({cause})")
        self.path = path
        self.cause = cause
