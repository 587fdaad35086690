"""앱 구성 및 패키지 검증 테스트"""

import sys
from pathlib import Path

import pytest
from fastapi.routing import APIRoute

from main import app


class TestProject:
    """프로젝트 구성 확인"""

    def test_python_version(self):
        """Python 버전 확인 (3.11+)"""
        assert sys.version_info >= (3, 11)

    def test_pyproject_exists(self):
        """pyproject.toml 존재 확인"""
        pyproject = Path(__file__).parent.parent / "pyproject.toml"
        assert pyproject.exists(), "pyproject.toml이 존재해야 합니다"


class TestPackageImports:
    """핵심 패키지 임포트 테스트"""

    def test_fastapi_import(self):
        import fastapi
        assert fastapi.__version__

    def test_pydantic_settings_import(self):
        import pydantic_settings
        assert pydantic_settings

    def test_aiofiles_import(self):
        import aiofiles
        assert aiofiles

    def test_img2pdf_import(self):
        import img2pdf
        assert img2pdf.convert

    def test_pypdf_import(self):
        import pypdf
        assert pypdf.PdfWriter


class TestAppConfiguration:
    """앱 설정 테스트"""

    def test_app_instance(self):
        from fastapi import FastAPI
        assert isinstance(app, FastAPI)

    def test_settings_load(self):
        """설정 로드 확인"""
        from app.core.config import settings
        assert settings.ENV in ("development", "production", "testing")
        assert settings.MAX_PDF_PAGES == 25
        assert settings.MAX_IMAGE_FILES == 20

    def test_cors_origins_from_string(self):
        """쉼표 구분 CORS origins 파싱"""
        from app.core.config import Settings
        s = Settings(ALLOWED_ORIGINS="http://a.test, http://b.test")
        assert s.ALLOWED_ORIGINS == ["http://a.test", "http://b.test"]

    def test_routes_registered(self):
        """라우트 등록 확인"""
        routes = [route.path for route in app.routes if isinstance(route, APIRoute)]
        assert "/health" in routes
        assert "/image-to-pdf" in routes
        assert "/pdf-to-image" in routes


@pytest.mark.asyncio
class TestBasicEndpoints:
    """기본 엔드포인트 테스트"""

    async def test_health_check(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    async def test_root(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.text == "PDF Backend Running"

    async def test_request_id_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    async def test_unknown_route_uses_error_shape(self, client):
        response = await client.get("/nope")
        assert response.status_code == 404
        assert "error" in response.json()
