"""
アーカイブ内のエントリ名を扱うためのユーティリティ

ベースファイル名の取り出しとディレクトリエントリの判定を行うヘルパー関数
"""

import stat
import zipfile

# ZipInfo.create_system の値
_SYSTEMS_FAT = (0, 11, 14)   # MS-DOS/FAT, NTFS, VFAT
_SYSTEMS_UNIX = (3, 19)      # UNIX, OS X (Darwin)

# MS-DOSのディレクトリ属性ビット
_MSDOS_DIR = 0x10


def base_name(path: str) -> str:
    """
    エントリ名の最後の要素（ベースファイル名）を返す

    ZIPのパス区切りは '/' のみ。バックスラッシュは名前の一部として扱う。
    末尾のスラッシュは無視し、要素が残らない場合は "." （空の名前）
    または "/" （スラッシュのみの名前）を返す。

    Args:
        path: アーカイブ内のエントリ名

    Returns:
        ベースファイル名
    """
    stripped = path.rstrip('/')
    if not stripped:
        return "." if not path else "/"
    return stripped[stripped.rfind('/') + 1:]


def is_dir_entry(info: zipfile.ZipInfo) -> bool:
    """
    ZIPエントリがディレクトリを表すかどうかを判定する

    名前の末尾スラッシュに加えて、作成元システムの外部属性も確認する。

    Args:
        info: 判定するZipInfo

    Returns:
        ディレクトリエントリの場合はTrue
    """
    if info.filename.endswith('/'):
        return True

    if info.create_system in _SYSTEMS_UNIX:
        mode = info.external_attr >> 16
        if mode and stat.S_ISDIR(mode):
            return True
    elif info.create_system in _SYSTEMS_FAT:
        if info.external_attr & _MSDOS_DIR:
            return True

    return False
