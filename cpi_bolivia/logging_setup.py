"""
Logging Setup Module
パッケージ共通のロギング設定

- ``configure_logging(...)``: ``cpi_bolivia`` ロガーに StreamHandler を1つだけ追加する。
  ダッシュボードなどのエントリポイントから起動時に1回呼ぶ。
- ``get_logger(name)``: ロガーを取得する。未設定の場合は NullHandler を付けて
  ライブラリ利用時の警告を抑える。
"""

import logging
import os
import sys

_PKG_LOGGER_NAME = "cpi_bolivia"
_CONFIGURED = False


def _parse_level(level):
    """ログレベルを数値に変換"""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    # 引数がない場合は環境変数
    env_val = os.getenv("CPI_BOLIVIA_LOG_LEVEL")
    if env_val and level is None:
        return _parse_level(env_val)
    return logging.INFO


def configure_logging(level=None, fmt=None, stream=sys.stderr):
    """パッケージのルートロガーを1回だけ設定"""
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    numeric_level = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s"))

    logger.setLevel(numeric_level)
    logger.addHandler(handler)
    # ルートロガーへの二重出力を防ぐ
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name):
    """ロガーを取得"""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
