"""DTOs shared by the facade and the multipart builder."""

from .file_upload import FileUpload

__all__ = ["FileUpload"]
