from app.services.job import ConversionJob, UploadedFile
from app.services.file_manager import FileManager
from app.services.job_workspace import JobFileResponse, JobWorkspaceManager
from app.services.image_set import select_images
from app.services.document_inspector import DocumentInspector, parse_page_count
from app.services.archive import build_zip
from app.services.poppler import PdfInfoQuery, PdftocairoRasterizer

__all__ = [
    "ConversionJob",
    "UploadedFile",
    "FileManager",
    "JobFileResponse",
    "JobWorkspaceManager",
    "select_images",
    "DocumentInspector",
    "parse_page_count",
    "build_zip",
    "PdfInfoQuery",
    "PdftocairoRasterizer",
]
