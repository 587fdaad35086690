import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.deps import get_workspace_manager
from app.api.routes import convert
from app.core.config import settings
from app.core.exceptions import ConversionError
from app.models import HealthResponse

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기 관리"""
    # 시작시 실행
    settings.ensure_directories()
    workspace = get_workspace_manager()

    # 이전 실행에서 남은 산출물 정리 후 스케줄러 시작
    removed = workspace.sweep_stale()
    if removed:
        logger.info(f"시작시 남은 산출물 {removed}개 삭제")
    await workspace.start_sweeper(interval_minutes=settings.SWEEP_INTERVAL_MINUTES)

    yield

    # 종료시 실행
    workspace.stop_sweeper()
    workspace.cleanup_all()


app = FastAPI(
    title="PDF Backend",
    description="이미지 ↔ PDF 양방향 변환 서비스",
    version="0.1.0",
    lifespan=lifespan,
    # 프로덕션에서는 docs/openapi 비활성화
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
)


# =============================================================================
# 미들웨어 설정
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
    max_age=600,  # preflight 캐시 10분
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """보안 헤더 추가 미들웨어"""
    # Request ID 생성/전달
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    response = await call_next(request)

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Content-Type-Options"] = "nosniff"

    return response


# =============================================================================
# 에러 핸들러 (응답 형식: {"error": "..."})
# =============================================================================

def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers={"X-Request-ID": request.headers.get("X-Request-ID", "")},
    )


@app.exception_handler(ConversionError)
async def conversion_exception_handler(request: Request, exc: ConversionError):
    """변환 작업 예외 핸들러"""
    return _error_response(request, exc.status_code, exc.detail)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """404/405 등 일반 HTTP 예외"""
    return _error_response(request, exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """요청 검증 실패 (잘못된 multipart 등)"""
    if settings.is_development:
        message = "; ".join(str(err.get("msg", "")) for err in exc.errors())
    else:
        message = "Invalid request"
    return _error_response(request, 400, message or "Invalid request")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """일반 예외 핸들러 (프로덕션에서 상세 에러 숨김)"""
    logger.exception("처리되지 않은 예외")
    if settings.is_development:
        message = str(exc) or "Internal server error"
    else:
        message = "Internal server error"
    return _error_response(request, 500, message)


# =============================================================================
# 엔드포인트
# =============================================================================

@app.get("/", response_class=PlainTextResponse)
async def root():
    return "PDF Backend Running"


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """헬스 체크 엔드포인트"""
    return HealthResponse()


# API 라우터 등록
app.include_router(convert.router, tags=["convert"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT)
