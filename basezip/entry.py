"""
インデックス済みエントリの情報と型定義

アーカイブ内のファイル情報を表すクラス
"""

import datetime
import zipfile
from enum import Enum
from typing import Optional


class EntryType(Enum):
    """エントリタイプを表す列挙型"""
    UNKNOWN = 0
    FILE = 1
    DIRECTORY = 2

    def is_dir(self) -> bool:
        """ディレクトリタイプかどうかを判定する"""
        return self == EntryType.DIRECTORY

    def is_file(self) -> bool:
        """ファイルタイプかどうかを判定する"""
        return self == EntryType.FILE


class EntryInfo:
    """
    インデックス内のエントリの情報を表すクラス

    エントリの基本情報（ベースファイル名、アーカイブ内の名前、サイズ、更新日時）を保持します。
    """

    def __init__(self,
                 name: str,
                 name_in_arc: Optional[str] = None,
                 type: EntryType = EntryType.FILE,
                 size: int = 0,
                 compressed_size: int = 0,
                 modified_time: Optional[datetime.datetime] = None,
                 crc: int = 0
                 ):
        """
        エントリ情報を初期化する

        Args:
            name: ベースファイル名（インデックスのキー）
            name_in_arc: アーカイブ内での名前（Noneの場合はnameが使用される）
            type: エントリのタイプ
            size: 展開後のサイズ（バイト）
            compressed_size: 圧縮後のサイズ（バイト）
            modified_time: 更新日時
            crc: CRC-32
        """
        self.name = name
        self.name_in_arc = name if name_in_arc is None else name_in_arc
        self.type = type
        self.size = size
        self.compressed_size = compressed_size
        self.modified_time = modified_time
        self.crc = crc

    @classmethod
    def from_zipinfo(cls, name: str, info: zipfile.ZipInfo) -> 'EntryInfo':
        """
        ZipInfoからエントリ情報を作成する

        Args:
            name: インデックスのキーとなるベースファイル名
            info: 元になるZipInfo

        Returns:
            作成したEntryInfo
        """
        try:
            modified = datetime.datetime(*info.date_time)
        except ValueError:
            # 日付フィールドが壊れている書庫もある
            modified = None

        return cls(
            name=name,
            name_in_arc=info.filename,
            type=EntryType.FILE,
            size=info.file_size,
            compressed_size=info.compress_size,
            modified_time=modified,
            crc=info.CRC,
        )

    def __repr__(self) -> str:
        return f"EntryInfo(name={self.name!r}, name_in_arc={self.name_in_arc!r}, size={self.size})"
