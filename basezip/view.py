"""
ZIPアーカイブビュー

ZIPアーカイブのエントリをベースファイル名で索引し、
個別エントリの取り出しと、選択したエントリだけを含む新しいアーカイブの作成を提供する
"""
import shutil
import zipfile
import zlib
from types import MappingProxyType
from typing import Any, BinaryIO, Callable, Dict, Iterable, List, Mapping, Optional

from logutils import log_print, log_trace, DEBUG, INFO, WARNING, ERROR, CRITICAL

from .entry import EntryInfo
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
from .path_utils import base_name, is_dir_entry

# エントリのコピーに使うバッファサイズ
COPY_BUFSIZE = 64 * 1024

# エントリを開く際に zipfile が送出しうる例外
_ENTRY_OPEN_ERRORS = (zipfile.BadZipFile, NotImplementedError, RuntimeError, OSError, ValueError)

# コピー中に読み書きで発生しうる例外
_COPY_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, OSError, ValueError)


class ArchiveView:
    """
    ZIPアーカイブをベースファイル名で参照するビュー

    コンストラクタでアーカイブを開き、ディレクトリ以外の全エントリを
    ベースファイル名（ディレクトリ部分を除いた名前）で索引する。
    同じベースファイル名が複数ある場合は後のエントリが優先される。

    単一スレッドからの利用を前提とする。close() の後は一切の操作ができない。
    """

    def __init__(self, path: str, encoding: Optional[str] = None):
        """
        アーカイブを開いてインデックスを構築する

        Args:
            path: ZIPアーカイブのパス
            encoding: UTF-8フラグのないエントリ名のデコードに使うエンコーディング
                      （Noneの場合はzipfileの既定値）

        Raises:
            OpenError: アーカイブが存在しない、読めない、ZIPではない場合
        """
        self.source_path = path
        self.encoding = encoding
        self._zip: Optional[zipfile.ZipFile] = self._open_source(path, encoding)
        self._index: Mapping[str, zipfile.ZipInfo] = MappingProxyType(self._build_index(self._zip))

    def debug_print(self, message: Any, *args, level: int = INFO, trace: bool = False, **kwargs):
        """
        デバッグ出力のラッパーメソッド

        Args:
            message: 出力するメッセージ
            *args: メッセージのフォーマット用引数
            level: ログレベル（デフォルトはINFO）
            trace: Trueならスタックトレース情報も出力する（デフォルトはFalse）
            **kwargs: 追加のキーワード引数
        """
        # クラス名をログの名前空間として使用
        name = f"basezip.{self.__class__.__name__}"

        if trace:
            log_trace(None, level, message, *args, name=name, **kwargs)
        else:
            log_print(level, message, *args, name=name, **kwargs)

    def debug_debug(self, message: Any, *args, trace: bool = False, **kwargs):
        """DEBUGレベルのログ出力"""
        self.debug_print(message, *args, level=DEBUG, trace=trace, **kwargs)

    def debug_info(self, message: Any, *args, trace: bool = False, **kwargs):
        """INFOレベルのログ出力"""
        self.debug_print(message, *args, level=INFO, trace=trace, **kwargs)

    def debug_warning(self, message: Any, *args, trace: bool = False, **kwargs):
        """WARNINGレベルのログ出力"""
        self.debug_print(message, *args, level=WARNING, trace=trace, **kwargs)

    def debug_error(self, message: Any, *args, trace: bool = False, **kwargs):
        """ERRORレベルのログ出力"""
        self.debug_print(message, *args, level=ERROR, trace=trace, **kwargs)

    def debug_critical(self, message: Any, *args, trace: bool = False, **kwargs):
        """CRITICALレベルのログ出力"""
        self.debug_print(message, *args, level=CRITICAL, trace=trace, **kwargs)

    def _error(self, exc_class: type, message: str, entry_name: Optional[str] = None) -> ArchiveError:
        """エラーをログに出力し、送出する例外オブジェクトを作成する"""
        self.debug_error(message)
        return exc_class(message, self.source_path, entry_name)

    def _open_source(self, path: str, encoding: Optional[str]) -> zipfile.ZipFile:
        """読み込み元のZIPファイルを開く"""
        self.debug_info(f"アーカイブを開きます: {path}")
        kwargs = {}
        if encoding:
            kwargs['metadata_encoding'] = encoding
        try:
            return zipfile.ZipFile(path, 'r', **kwargs)
        except (OSError, zipfile.BadZipFile, EOFError, LookupError) as e:
            raise self._error(OpenError, f"アーカイブを開けません: {path} - {e}") from e

    def _build_index(self, zf: zipfile.ZipFile) -> Dict[str, zipfile.ZipInfo]:
        """
        ベースファイル名からエントリへのインデックスを構築する

        Args:
            zf: 開いているZipFile

        Returns:
            ベースファイル名をキーとする辞書（セントラルディレクトリ順）
        """
        index: Dict[str, zipfile.ZipInfo] = {}
        skipped = 0

        for info in zf.infolist():
            if is_dir_entry(info):
                skipped += 1
                continue

            name = base_name(info.filename)
            previous = index.pop(name, None)
            if previous is not None:
                self.debug_info(f"  ベースファイル名が重複しています: {name} ({previous.filename} -> {info.filename})")
            index[name] = info

        self.debug_info(f"インデックス構築完了: {self.source_path}, {len(index)} エントリ (ディレクトリ {skipped} 件を除外)")
        return index

    def _ensure_open(self) -> zipfile.ZipFile:
        """アーカイブが開いていることを確認する"""
        if self._zip is None:
            raise ArchiveClosedError(f"アーカイブは既に閉じられています: {self.source_path}", self.source_path)
        return self._zip

    def _open_entry(self, zf: zipfile.ZipFile, basename: str) -> BinaryIO:
        """インデックス済みのエントリを読み込み用に開く"""
        info = self._index[basename]
        try:
            return zf.open(info, 'r')
        except _ENTRY_OPEN_ERRORS as e:
            raise self._error(
                OpenEntryError,
                f"{self.source_path} 内の {basename} を開けません: {e}",
                basename
            ) from e

    @property
    def index(self) -> Mapping[str, zipfile.ZipInfo]:
        """ベースファイル名からZipInfoへの読み取り専用インデックス"""
        return self._index

    @property
    def closed(self) -> bool:
        """close済みかどうか"""
        return self._zip is None

    def names(self) -> List[str]:
        """インデックス済みのベースファイル名の一覧を返す"""
        self._ensure_open()
        return list(self._index)

    def entries(self) -> List[EntryInfo]:
        """インデックス済みエントリの情報の一覧を返す"""
        self._ensure_open()
        return [EntryInfo.from_zipinfo(name, info) for name, info in self._index.items()]

    def pick(self, basename: str, consumer: Callable[[BinaryIO], Any]) -> Any:
        """
        エントリの読み込みストリームを consumer に渡す

        ストリームは pick から戻る時点で必ず閉じられる。
        consumer が送出した例外はそのまま呼び出し元に伝わる。

        Args:
            basename: 取り出すエントリのベースファイル名
            consumer: 読み込みストリームを受け取る呼び出し可能オブジェクト

        Returns:
            consumer の戻り値

        Raises:
            NotFoundError: basename がインデックスに存在しない場合
            OpenEntryError: エントリを展開用に開けない場合
        """
        zf = self._ensure_open()
        if basename not in self._index:
            raise self._error(
                NotFoundError,
                f"ファイル {basename} は {self.source_path} に含まれていません",
                basename
            )

        self.debug_debug(f"エントリを取り出します: {basename}")
        with self._open_entry(zf, basename) as stream:
            return consumer(stream)

    def read(self, basename: str) -> bytes:
        """
        エントリの内容をすべて読み込む

        Args:
            basename: 読み込むエントリのベースファイル名

        Returns:
            展開後のエントリの内容
        """
        def read_all(stream: BinaryIO) -> bytes:
            try:
                return stream.read()
            except _COPY_ERRORS as e:
                raise self._error(CopyError, f"{basename} の内容を読み込めません: {e}", basename) from e

        return self.pick(basename, read_all)

    def extract_to(self, basename: str, sink: BinaryIO) -> int:
        """
        エントリの内容を書き込み可能なバイナリストリームにコピーする

        Args:
            basename: コピーするエントリのベースファイル名
            sink: 出力先のストリーム

        Returns:
            コピーしたバイト数

        Raises:
            CopyError: 展開（CRC不一致など）や書き込みに失敗した場合
        """
        def copy(stream: BinaryIO) -> int:
            total = 0
            try:
                while True:
                    chunk = stream.read(COPY_BUFSIZE)
                    if not chunk:
                        return total
                    sink.write(chunk)
                    total += len(chunk)
            except _COPY_ERRORS as e:
                raise self._error(CopyError, f"{basename} をコピーできません: {e}", basename) from e

        return self.pick(basename, copy)

    def rezip(self, destination: str, basenames: Iterable[str]) -> None:
        """
        指定したエントリだけを含む新しいZIPアーカイブを作成する

        エントリは basenames の順に、ベースファイル名で格納される。
        存在しない名前が1つでもあれば、出力先に触れる前に失敗する。
        書き込みは一時ファイルを経由しないため、途中で失敗すると
        出力先には不完全なファイルが残る。

        Args:
            destination: 作成するZIPアーカイブのパス（既存のファイルは上書き）
            basenames: 格納するエントリのベースファイル名（順序を保持）

        Raises:
            MissingEntryError: basenames にインデックスに存在しない名前がある場合
            CreateError: 出力先を書き込み用に開けない場合
            OpenEntryError: 読み込み元のエントリを開けない場合
            CopyError: コピー中に読み書きが失敗した場合
            FinalizeError: セントラルディレクトリの書き込みに失敗した場合
            CloseError: 出力先ファイルを閉じられない場合
        """
        zf = self._ensure_open()
        names = list(basenames)

        # 出力する前にすべての名前を検証する
        for name in names:
            if name not in self._index:
                raise self._error(
                    MissingEntryError,
                    f"必要なファイル {name} が {self.source_path} に含まれていません",
                    name
                )

        self.debug_info(f"アーカイブを再構成します: {destination} ({len(names)} エントリ)")

        try:
            fh = open(destination, 'wb')
        except OSError as e:
            raise self._error(CreateError, f"出力先のZIPファイルを開けません: {destination} - {e}") from e

        writer = None
        try:
            writer = zipfile.ZipFile(fh, 'w', compression=zipfile.ZIP_DEFLATED)
            for name in names:
                self._copy_entry(zf, writer, name)
        except BaseException:
            self._release_destination(writer, fh)
            raise

        try:
            writer.close()
        except (OSError, ValueError) as e:
            self._release_destination(writer, fh)
            raise self._error(FinalizeError, f"ZIPライターを閉じられません: {destination} - {e}") from e

        try:
            fh.close()
        except OSError as e:
            raise self._error(CloseError, f"出力先のZIPファイルを閉じられません: {destination} - {e}") from e

        self.debug_info(f"アーカイブの再構成が完了しました: {destination}")

    def _copy_entry(self, zf: zipfile.ZipFile, writer: zipfile.ZipFile, basename: str) -> None:
        """読み込み元のエントリを展開して出力先に書き込む"""
        info = self._index[basename]

        zinfo = zipfile.ZipInfo(basename, date_time=info.date_time)
        zinfo.compress_type = zipfile.ZIP_DEFLATED
        # ZIP64が必要かどうかの判定に使われる
        zinfo.file_size = info.file_size

        with self._open_entry(zf, basename) as src:
            try:
                with writer.open(zinfo, 'w') as dst:
                    shutil.copyfileobj(src, dst, COPY_BUFSIZE)
            except _COPY_ERRORS as e:
                raise self._error(
                    CopyError,
                    f"{basename} をZIPアーカイブにコピーできません: {e}",
                    basename
                ) from e

        self.debug_debug(f"  コピーしました: {info.filename} -> {basename} ({info.file_size} バイト)")

    def _release_destination(self, writer: Optional[zipfile.ZipFile], fh: BinaryIO) -> None:
        """失敗時に出力先のハンドルを解放する（出力先の内容は不完全なまま残る）"""
        releases = [fh.close] if writer is None else [writer.close, fh.close]
        for release in releases:
            try:
                release()
            except (OSError, ValueError) as e:
                self.debug_warning(f"出力先の解放中にエラーが発生しました: {e}")

    def close(self) -> None:
        """
        読み込み元のアーカイブを閉じる

        2回目以降の呼び出しは何もしない。
        """
        if self._zip is None:
            return
        zf, self._zip = self._zip, None
        zf.close()
        self.debug_debug(f"アーカイブを閉じました: {self.source_path}")

    def __enter__(self) -> 'ArchiveView':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __contains__(self, basename: object) -> bool:
        return basename in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        state = "closed" if self.closed else f"{len(self._index)} entries"
        return f"<ArchiveView {self.source_path!r} ({state})>"


def open_archive(path: str, encoding: Optional[str] = None) -> ArchiveView:
    """
    アーカイブを開いてArchiveViewを作成する

    Args:
        path: ZIPアーカイブのパス
        encoding: UTF-8フラグのないエントリ名のデコードに使うエンコーディング

    Returns:
        インデックス構築済みのArchiveView

    Raises:
        OpenError: アーカイブを開けない場合
    """
    return ArchiveView(path, encoding=encoding)
