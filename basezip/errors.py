"""
basezipの例外定義

アーカイブ操作で発生するエラーの種類を表す例外クラス群
"""
from typing import Optional


class ArchiveError(IOError):
    """
    アーカイブ操作エラーの基底クラス

    Attributes:
        archive_path: 対象アーカイブのパス
        entry_name: 対象エントリのベースファイル名（該当しない場合はNone）
    """

    def __init__(self, message: str, archive_path: str = "", entry_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.archive_path = archive_path
        self.entry_name = entry_name

    def __str__(self) -> str:
        return self.message


class OpenError(ArchiveError):
    """アーカイブを開けない（存在しない、読めない、ZIPではない）"""


class NotFoundError(ArchiveError):
    """pickで指定したベースファイル名がインデックスに存在しない"""


class OpenEntryError(ArchiveError):
    """インデックス済みのエントリを読み込み用に開けない"""


class MissingEntryError(ArchiveError):
    """rezipで指定したベースファイル名がインデックスに存在しない"""


class CreateError(ArchiveError):
    """出力先のアーカイブを書き込み用に開けない"""


class CopyError(ArchiveError):
    """エントリのコピー中に読み書きが失敗した"""


class FinalizeError(ArchiveError):
    """出力先アーカイブのセントラルディレクトリを書き込めない"""


class CloseError(ArchiveError):
    """出力先ファイルを閉じられない"""


class ArchiveClosedError(ArchiveError, ValueError):
    """close済みのArchiveViewを操作しようとした"""
