"""設定モジュール — 環境変数・定数定義・ダッシュボード設定の読み込み."""

from __future__ import annotations

import os
import re
from datetime import timedelta
from pathlib import Path

import yaml
from dotenv import load_dotenv

from dashwidgets.errors import ConfigError

# .env は実行ディレクトリに配置
load_dotenv(Path.cwd() / ".env")

# --- 微博 ---
WEIBO_HOT_SEARCH_URL = "https://weibo.com/ajax/side/hotSearch"
WEIBO_SEARCH_URL = "https://s.weibo.com/weibo?q="

# --- Random Fact ---
FACT_API_URL = "https://uselessfacts.jsph.pl/api/v2/facts/random"
FACT_SOURCE_HOST = "uselessfacts.jsph.pl"

# --- User-Agent ---
PC_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)

# 微博はブラウザ以外のクライアントを弾く
WEIBO_HEADERS = {
    "User-Agent": PC_USER_AGENT,
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
    "Referer": "https://weibo.com",
}

# --- リクエスト設定 ---
REQUEST_TIMEOUT = 15  # 秒
FACT_REQUEST_TIMEOUT = 30  # 秒
REWRITE_MAX_TOKENS = 512

# --- デフォルト値 ---
DEFAULT_SHOW_COUNT = 10
MAX_SHOW_COUNT = 50
DEFAULT_REFRESH_INTERVAL = 30  # 分
DEFAULT_FACT_CACHE_DURATION = timedelta(hours=2)

# --- ログ ---
LOG_DIR = Path(os.getenv("DASHWIDGETS_LOG_DIR", Path.cwd() / "logs"))

_DURATION_PATTERN = re.compile(r"^(\d+)(s|m|h|d)$")
_DURATION_UNITS = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def parse_duration(value: str | int | None) -> timedelta:
    """"30s" / "15m" / "2h" / "1d" 形式の文字列を timedelta に変換する.

    数値はそのまま秒として扱う。None と空文字は 0。

    Raises:
        ConfigError: 形式が不正な場合
    """
    if value is None or value == "":
        return timedelta(0)
    if isinstance(value, bool):
        raise ConfigError(f"不正な期間指定: {value!r}")
    if isinstance(value, int):
        return timedelta(seconds=value)

    m = _DURATION_PATTERN.match(str(value).strip())
    if not m:
        raise ConfigError(f"不正な期間指定: {value!r}")
    return timedelta(**{_DURATION_UNITS[m.group(2)]: int(m.group(1))})


def _expand_env(text: str) -> str:
    """${NAME} を環境変数の値に置き換える."""

    def _replace(m: re.Match) -> str:
        name = m.group(1)
        if name not in os.environ:
            raise ConfigError(f"環境変数 {name} が設定されていません")
        return os.environ[name]

    return _ENV_PATTERN.sub(_replace, text)


def load_dashboard_config(path: str | Path) -> list[dict]:
    """YAML のダッシュボード設定を読み込み、ウィジェット設定のリストを返す.

    Returns:
        [{"type": "weibo", "limit": 20, ...}, ...]

    Raises:
        ConfigError: ファイルが読めない・形式が不正な場合
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"設定ファイルを読み込めません: {path}: {e}") from e

    try:
        data = yaml.safe_load(_expand_env(raw)) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"設定ファイルの YAML が不正です: {path}: {e}") from e

    widgets = data.get("widgets") if isinstance(data, dict) else None
    if not isinstance(widgets, list):
        raise ConfigError(f"widgets リストがありません: {path}")

    for i, options in enumerate(widgets):
        if not isinstance(options, dict) or not options.get("type"):
            raise ConfigError(f"widgets[{i}] に type がありません")

    return widgets
