"""
basezip

ZIPアーカイブのエントリをベースファイル名で取り出し、
選択したエントリだけを新しいアーカイブに書き出すユーティリティ
"""

from .entry import EntryInfo, EntryType
from .errors import (
    ArchiveError,
    ArchiveClosedError,
    CloseError,
    CopyError,
    CreateError,
    FinalizeError,
    MissingEntryError,
    NotFoundError,
    OpenEntryError,
    OpenError,
)
from .view import ArchiveView, open_archive

__version__ = "0.1.0"

__all__ = [
    'ArchiveView', 'open_archive',
    'EntryInfo', 'EntryType',
    'ArchiveError', 'ArchiveClosedError', 'OpenError', 'NotFoundError',
    'OpenEntryError', 'MissingEntryError', 'CreateError', 'CopyError',
    'FinalizeError', 'CloseError',
]
