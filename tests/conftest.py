import io
import os
from pathlib import Path
from typing import List

os.environ.setdefault("ENV", "testing")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from pypdf import PdfReader, PdfWriter

from app.api.deps import get_pdf_to_images_converter, get_workspace_manager
from app.core.exceptions import RenderError
from app.services import DocumentInspector, JobWorkspaceManager
from app.services.converters import PdfToImagesConverter
from main import app


def make_image(fmt: str, size=(30, 20), color=(200, 30, 30)) -> bytes:
    """테스트용 이미지 바이트 (fmt: 'jpeg' 또는 'png')"""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt.upper())
    return buffer.getvalue()


def make_pdf(pages: int, size=(100, 100)) -> bytes:
    """빈 페이지 PDF"""
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=size[0], height=size[1])
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def page_sizes(pdf_bytes: bytes) -> List[tuple]:
    reader = PdfReader(io.BytesIO(pdf_bytes))
    return [
        (round(float(page.mediabox.width)), round(float(page.mediabox.height)))
        for page in reader.pages
    ]


def leftover_paths(workspace: JobWorkspaceManager) -> List[Path]:
    return list(workspace.upload_dir.iterdir()) + list(workspace.output_dir.iterdir())


class FakePageCountQuery:
    """pdfinfo 대체 (output이 없으면 pypdf로 실제 페이지 수를 출력)"""

    def __init__(self, output=None):
        self.output = output
        self.calls = []

    def __call__(self, pdf_path: Path) -> str:
        self.calls.append(pdf_path)
        if self.output is not None:
            return self.output
        pages = len(PdfReader(pdf_path).pages)
        return f"Producer:       test\nPages:          {pages}\nEncrypted:      no\n"


class FakeRasterizer:
    """pdftocairo 대체 (페이지 크기와 같은 이미지를 '<prefix>-<n>.<ext>'로 저장)"""

    def __init__(self, fail_after_write: bool = False):
        self.fail_after_write = fail_after_write
        self.calls = []

    def rasterize(self, pdf_path, image_format, output_prefix):
        self.calls.append((pdf_path, image_format, output_prefix))
        extension = ".jpg" if image_format == "jpeg" else ".png"

        paths = []
        for number, page in enumerate(PdfReader(pdf_path).pages, start=1):
            size = (round(float(page.mediabox.width)), round(float(page.mediabox.height)))
            path = output_prefix.parent / f"{output_prefix.name}-{number}{extension}"
            Image.new("RGB", size, (255, 255, 255)).save(path, format=image_format.upper())
            paths.append(path)

        if self.fail_after_write:
            raise RenderError()
        return paths


@pytest.fixture
def workspace(tmp_path) -> JobWorkspaceManager:
    return JobWorkspaceManager(tmp_path / "uploads", tmp_path / "output")


@pytest.fixture
def page_query() -> FakePageCountQuery:
    return FakePageCountQuery()


@pytest.fixture
def rasterizer() -> FakeRasterizer:
    return FakeRasterizer()


@pytest.fixture
def pdf_converter(page_query, rasterizer) -> PdfToImagesConverter:
    return PdfToImagesConverter(DocumentInspector(page_query, max_pages=25), rasterizer)


@pytest_asyncio.fixture
async def client(workspace, pdf_converter):
    app.dependency_overrides[get_workspace_manager] = lambda: workspace
    app.dependency_overrides[get_pdf_to_images_converter] = lambda: pdf_converter

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
