"""
ロギング用ユーティリティ

basezip全体でのロギング操作を統一的に扱うためのユーティリティ関数群
"""
import os
import traceback
from typing import Optional, Any

# Pythonの標準loggingモジュールをインポート
import logging as py_logging

# ログレベルの定数定義
DEBUG = py_logging.DEBUG
INFO = py_logging.INFO
WARNING = py_logging.WARNING
ERROR = py_logging.ERROR
CRITICAL = py_logging.CRITICAL

# レベル名との対応表（コマンドライン引数の解釈用）
LEVEL_NAMES = {
    'DEBUG': DEBUG,
    'INFO': INFO,
    'WARNING': WARNING,
    'ERROR': ERROR,
    'CRITICAL': CRITICAL,
}

LOG_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'

# デフォルトのログレベル
_log_level = ERROR

# ロガーオブジェクトの格納用辞書
_loggers = {}

# ロギング先のファイルパス
_log_file: Optional[str] = None


def parse_level(name: str) -> int:
    """
    レベル名（大文字小文字は問わない）をログレベルに変換する

    Args:
        name: レベル名（DEBUG, INFO, WARNING, ERROR, CRITICAL）

    Returns:
        ログレベルの数値

    Raises:
        ValueError: 未知のレベル名の場合
    """
    try:
        return LEVEL_NAMES[name.upper()]
    except KeyError:
        raise ValueError(f"未知のログレベルです: {name}") from None


def get_level() -> int:
    """現在のログレベルを返す"""
    return _log_level


def setup_logging(level: int = ERROR, logfile: str = None) -> None:
    """
    ロギングシステムをセットアップする

    既に作成済みのロガーにも新しいレベルと出力先が反映される。

    Args:
        level: ログレベル（デフォルトはERROR）
        logfile: ログの出力先ファイル（デフォルトはNone）
    """
    global _log_level, _log_file
    _log_level = level

    if logfile:
        # ログディレクトリが存在しない場合は作成
        log_dir = os.path.dirname(logfile)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
    _log_file = logfile or None

    # 既存のロガーのレベルとハンドラーを更新
    for logger in _loggers.values():
        _configure(logger)


def _configure(logger: py_logging.Logger) -> None:
    """ロガーに現在の設定（レベル、ハンドラー）を適用する"""
    logger.setLevel(_log_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = py_logging.Formatter(LOG_FORMAT)

    # コンソールハンドラーを追加
    console = py_logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    # ファイルハンドラーも設定されていれば追加
    if _log_file:
        file_handler = py_logging.FileHandler(_log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # ルートロガーへの二重出力を防ぐ
    logger.propagate = False


def get_logger(name: str) -> py_logging.Logger:
    """
    名前付きのロガーを取得する

    Args:
        name: ロガー名

    Returns:
        設定済みのロガーオブジェクト
    """
    if name in _loggers:
        return _loggers[name]

    logger = py_logging.getLogger(name)
    _configure(logger)

    _loggers[name] = logger
    return logger


def log_print(level: int, message: Any, *args, name: str = None, **kwargs) -> None:
    """
    指定したレベルでメッセージをログに出力する

    Args:
        level: ログレベル
        message: 出力するメッセージ
        *args: メッセージのフォーマット引数
        name: ロガー名（デフォルトは'basezip'）
        **kwargs: その他のキーワード引数
    """
    if level < _log_level:
        return

    get_logger(name or 'basezip').log(level, message, *args, **kwargs)


def log_trace(e: Optional[BaseException], level: int, message: Any, *args, name: str = None, **kwargs) -> None:
    """
    例外のトレース情報を含めてログに出力する

    Args:
        e: 例外オブジェクト（NoneでもOK）
        level: ログレベル
        message: 出力するメッセージ
        *args: メッセージのフォーマット引数
        name: ロガー名（デフォルトは'basezip'）
        **kwargs: その他のキーワード引数
    """
    if level < _log_level:
        return

    # まずメッセージを出力
    log_print(level, message, *args, name=name, **kwargs)

    # スタックトレースを取得して出力
    if e is not None:
        stack = ''.join(traceback.format_exception(type(e), e, e.__traceback__))
    else:
        stack = ''.join(traceback.format_stack()[:-1])  # 自分自身の呼び出しを除外

    get_logger(name or 'basezip').log(level, "スタックトレース:\n%s", stack)
