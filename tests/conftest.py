"""テスト用の共通フィクスチャ"""
import io
import zipfile

import pytest

from basezip import open_archive

# セントラルディレクトリのシグネチャ
CENTRAL_DIR_SIGNATURE = b"PK\x01\x02"


def make_zip(path, members, compression=zipfile.ZIP_DEFLATED):
    """
    (名前またはZipInfo, 内容) のリストからZIPファイルを作成する

    各メンバーはそのまま ZipFile.writestr に渡す。
    """
    with zipfile.ZipFile(path, 'w', compression=compression) as zf:
        for name, data in members:
            zf.writestr(name, data)
    return path


class FailingFile(io.BytesIO):
    """
    指定した時点で失敗する書き込み先

    fail_on: このバイト列で始まる write を OSError にする
    fail_close: 最初の close を OSError にする
    """

    def __init__(self, fail_on=None, fail_close=False):
        super().__init__()
        self.fail_on = fail_on
        self.fail_close = fail_close

    def write(self, data):
        if self.fail_on is not None and bytes(data[:len(self.fail_on)]) == self.fail_on:
            raise OSError("No space left on device")
        return super().write(data)

    def close(self):
        if self.fail_close:
            self.fail_close = False
            raise OSError("Input/output error")
        super().close()


@pytest.fixture
def sample_zip(tmp_path):
    """dir/test1, test2, test3 を含むアーカイブ"""
    return make_zip(tmp_path / "test.zip", [
        ("dir/", b""),
        ("dir/test1", b"AAA"),
        ("test2", b"BBB"),
        ("test3", b"CCC"),
    ])


@pytest.fixture
def corrupt_zip(tmp_path):
    """test1 の内容がCRCと一致しない（無圧縮）アーカイブ"""
    path = make_zip(tmp_path / "corrupt.zip", [
        ("test1", b"original-contents"),
        ("test2", b"BBB"),
    ], compression=zipfile.ZIP_STORED)
    raw = path.read_bytes()
    path.write_bytes(raw.replace(b"original-contents", b"tampered-contents"))
    return path


@pytest.fixture
def view(sample_zip):
    v = open_archive(str(sample_zip))
    yield v
    v.close()


def read_zip(path):
    """ZIPファイルの (名前, 内容) のリストをセントラルディレクトリ順に返す"""
    with zipfile.ZipFile(path) as zf:
        return [(info.filename, zf.read(info)) for info in zf.infolist()]
