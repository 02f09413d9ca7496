"""Record store and file operations for zkvault."""

from .file_manager import (
    upload_file,
    download_file,
    list_files,
    delete_file,
    describe_failure,
)
from .key_slot import PublicKeySlot
from .models import SealedFile
from .store import JSONRecordStore, RecordStore

__all__ = [
    "upload_file",
    "download_file",
    "list_files",
    "delete_file",
    "describe_failure",
    "PublicKeySlot",
    "SealedFile",
    "RecordStore",
    "JSONRecordStore",
]
