"""Filebase object storage and the document upload bridge."""

from evault.services.storage.documents import DocumentUploadBridge, RecordedUpload
from evault.services.storage.filebase import FilebaseStorage

__all__ = ["DocumentUploadBridge", "FilebaseStorage", "RecordedUpload"]
