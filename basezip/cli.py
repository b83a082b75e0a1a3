#!/usr/bin/env python3
"""
basezipのコマンドラインツール

ZIPアーカイブのエントリを標準出力に取り出し、選択したエントリだけを
新しいアーカイブに書き出す。エラーが発生した時点でログを出力して終了する。
"""
import os
import sys
import argparse
from typing import BinaryIO, List, Optional

from logutils import setup_logging, log_print, log_trace, parse_level, LEVEL_NAMES, DEBUG, ERROR

from .errors import ArchiveError
from .view import open_archive

# アクションが指定されなかった場合に使うデモ用の設定
DEMO_PICKS = ['test1', 'test2', 'test3']
DEMO_KEEP = ['test1', 'test2']
DEMO_OUTPUT = 'out.zip'

LOGGER_NAME = 'basezip.cli'


def build_parser() -> argparse.ArgumentParser:
    """コマンドライン引数のパーサーを作成する"""
    parser = argparse.ArgumentParser(
        prog='basezip',
        description="ZIPアーカイブのエントリをベースファイル名で取り出し、選択したエントリで新しいアーカイブを作成する"
    )
    parser.add_argument('archive', help="読み込むZIPファイルのパス")
    parser.add_argument('-p', '--pick', dest='picks', action='append', default=[], metavar='NAME',
                        help="標準出力に書き出すエントリ（複数指定可、指定順に出力）")
    parser.add_argument('-l', '--list', action='store_true', help="インデックスの一覧を表示")
    parser.add_argument('-o', '--output', metavar='OUT', help="作成するZIPファイルのパス")
    parser.add_argument('-k', '--keep', nargs='+', default=[], metavar='NAME',
                        help="出力先に格納するエントリ（指定順に格納）")
    parser.add_argument('--encoding', help="UTF-8フラグのないエントリ名のエンコーディング（例: cp932）")
    parser.add_argument('-d', '--debug', action='store_true', help="デバッグモードを有効化")
    parser.add_argument('--log-level', choices=sorted(LEVEL_NAMES, key=LEVEL_NAMES.get), type=str.upper,
                        help="ログレベル（デフォルトはERROR）")
    parser.add_argument('--log-file', help="ログの出力先ファイル")
    return parser


def list_entries(view, out: BinaryIO) -> None:
    """インデックスの内容を一覧表示する"""
    for entry in view.entries():
        modified = entry.modified_time.strftime('%Y-%m-%d %H:%M:%S') if entry.modified_time else '-' * 19
        line = f"{entry.size:>12,}  {modified}  {entry.name}"
        if entry.name_in_arc != entry.name:
            line += f"  ({entry.name_in_arc})"
        out.write((line + "\n").encode('utf-8'))


def run(args: argparse.Namespace, out: BinaryIO) -> None:
    """
    引数に従ってアーカイブを処理する

    Args:
        args: 解析済みのコマンドライン引数
        out: エントリの出力先

    Raises:
        ArchiveError: アーカイブ操作に失敗した場合
    """
    picks: List[str] = args.picks
    output: Optional[str] = args.output
    keep: List[str] = args.keep

    if not (picks or args.list or output):
        # 何も指定されていなければデモ動作
        picks = DEMO_PICKS
        output = os.path.join(os.path.dirname(args.archive), DEMO_OUTPUT)
        keep = DEMO_KEEP
        log_print(DEBUG, f"デモ動作: {picks} を出力し、{keep} を {output} に書き出します", name=LOGGER_NAME)

    with open_archive(args.archive, encoding=args.encoding) as view:
        if args.list:
            list_entries(view, out)

        for name in picks:
            view.extract_to(name, out)
        out.flush()

        if output:
            view.rezip(output, keep)


def main(argv: Optional[List[str]] = None, stdout: Optional[BinaryIO] = None) -> int:
    """
    コマンドラインのエントリポイント

    Args:
        argv: コマンドライン引数（Noneの場合はsys.argv）
        stdout: エントリの出力先（Noneの場合は標準出力）

    Returns:
        終了コード（成功時0、失敗時1）
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.output and not args.keep:
        parser.error("--output には --keep で格納するエントリを指定してください")
    if args.keep and not args.output:
        parser.error("--keep には --output で出力先を指定してください")

    level = ERROR
    if args.log_level:
        level = parse_level(args.log_level)
    if args.debug:
        level = DEBUG
    setup_logging(level, args.log_file)

    out = stdout if stdout is not None else sys.stdout.buffer

    try:
        run(args, out)
    except (ArchiveError, OSError) as e:
        if args.debug:
            log_trace(e, ERROR, f"エラー: {e}", name=LOGGER_NAME)
        else:
            log_print(ERROR, f"エラー: {e}", name=LOGGER_NAME)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
