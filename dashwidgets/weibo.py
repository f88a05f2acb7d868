"""微博ホット検索ウィジェット.

取得フロー:
  1. weibo.com/ajax/side/hotSearch をブラウザ相当のヘッダーで取得
  2. realtime → hotgovs の順に連結
  3. 空キーワード・カテゴリ不一致を除外して件数制限
  4. 各項目に s.weibo.com の検索 URL を付与
"""

from __future__ import annotations

import logging
from datetime import timedelta
from urllib.parse import quote_plus

import requests

from dashwidgets.config import (
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_SHOW_COUNT,
    MAX_SHOW_COUNT,
    REQUEST_TIMEOUT,
    WEIBO_HEADERS,
    WEIBO_HOT_SEARCH_URL,
    WEIBO_SEARCH_URL,
)
from dashwidgets.errors import (
    APIStatusError,
    DecodeError,
    HTTPStatusError,
    NetworkError,
    WidgetError,
)
from dashwidgets.models import HotSearchEntry, HotSearchItem, HotSearchSnapshot
from dashwidgets.widget import UpdateContext, Widget

logger = logging.getLogger(__name__)


def normalize_show_count(show_count: int, limit: int) -> int:
    """表示件数を決める. limit が優先、範囲外は 10 / 50 に丸める."""
    if limit > 0:
        show_count = limit
    if show_count <= 0:
        return DEFAULT_SHOW_COUNT
    return min(show_count, MAX_SHOW_COUNT)


def build_search_url(item: HotSearchItem) -> str:
    # word_scheme が無い項目はキーワードで検索する
    query = item.word_scheme or item.word
    return WEIBO_SEARCH_URL + quote_plus(query)


def parse_hot_search_response(payload: object) -> list[HotSearchItem]:
    """API レスポンスの JSON から realtime → hotgovs の順で項目を取り出す.

    Raises:
        DecodeError: 想定スキーマと一致しない場合
        APIStatusError: ok が 1 以外の場合
    """
    if not isinstance(payload, dict):
        raise DecodeError("レスポンスが JSON オブジェクトではありません")

    ok = payload.get("ok", 0)
    if isinstance(ok, bool) or not isinstance(ok, int):
        raise DecodeError(f"ok の型が不正です: {ok!r}")
    if ok != 1:
        raise APIStatusError(f"API がエラー状態を返しました: ok={ok}")

    data = payload.get("data") or {}
    if not isinstance(data, dict):
        raise DecodeError("data がオブジェクトではありません")

    items: list[HotSearchItem] = []
    for key in ("realtime", "hotgovs"):
        rows = data.get(key) or []
        if not isinstance(rows, list):
            raise DecodeError(f"data.{key} が配列ではありません")
        items.extend(HotSearchItem.from_dict(row) for row in rows)

    return items


def filter_hot_searches(
    items: list[HotSearchItem], show_count: int, category: str = ""
) -> list[HotSearchItem]:
    """空キーワードとカテゴリ不一致を除外し、show_count 件に切り詰める."""
    filtered = [
        item for item in items
        if item.word and (not category or item.label_name == category)
    ]
    if show_count > 0:
        filtered = filtered[:show_count]
    return filtered


def fetch_hot_searches(
    ctx: UpdateContext, show_count: int, category: str = ""
) -> list[HotSearchEntry]:
    """微博ホット検索を取得し、表示用の項目リストを返す.

    Args:
        ctx: キャンセル用コンテキスト
        show_count: 最大件数 (0 以下で無制限)
        category: カテゴリ名の完全一致フィルタ (空で無効)

    Raises:
        NetworkError / HTTPStatusError / DecodeError / APIStatusError
    """
    ctx.raise_if_cancelled()

    with requests.Session() as session:
        unregister = ctx.on_cancel(session.close)
        try:
            resp = ctx.call(
                session.get,
                WEIBO_HOT_SEARCH_URL,
                headers=WEIBO_HEADERS,
                timeout=ctx.timeout(REQUEST_TIMEOUT),
            )
        except requests.RequestException as e:
            raise NetworkError(f"リクエスト失敗: {e}") from e
        finally:
            unregister()

    ctx.raise_if_cancelled()

    if resp.status_code != 200:
        raise HTTPStatusError(
            f"API リクエスト失敗、ステータスコード: {resp.status_code}", resp.status_code
        )

    try:
        payload = resp.json()
    except ValueError as e:
        raise DecodeError(f"JSON レスポンスのパース失敗: {e}") from e

    items = filter_hot_searches(parse_hot_search_response(payload), show_count, category)
    return [HotSearchEntry(item=item, url=build_search_url(item)) for item in items]


class WeiboWidget(Widget):
    """微博ホット検索パネル."""

    widget_type = "weibo"
    template_name = "weibo.html"

    def __init__(self, options: dict | None = None):
        super().__init__(options)
        self.show_count = 0
        self.category = ""
        self.refresh_interval = 0  # 分
        self.snapshot: HotSearchSnapshot | None = None

    @property
    def hot_searches(self) -> tuple[HotSearchEntry, ...]:
        return self.snapshot.entries if self.snapshot else ()

    def initialize(self) -> None:
        self.with_title("Weibo HotSearch")

        self.show_count = normalize_show_count(
            self.int_option("show-count"), self.int_option("limit")
        )
        self.category = self.str_option("category")

        self.refresh_interval = self.int_option("refresh-interval")
        if self.refresh_interval <= 0:
            self.refresh_interval = DEFAULT_REFRESH_INTERVAL

        self.with_cache_duration(timedelta(minutes=self.refresh_interval))
        self.content_available = True

    def update(self, ctx: UpdateContext) -> None:
        try:
            entries = fetch_hot_searches(ctx, self.show_count, self.category)
        except WidgetError as e:
            logger.error("微博ホット検索の取得失敗: %s", e)
            self.with_error(e).schedule_early_update()
            return

        self.snapshot = HotSearchSnapshot(entries=tuple(entries), last_updated=self.clock())
        self.with_error(None).with_notice(None).schedule_next_update()
        logger.info("微博ホット検索: %d 件を取得", len(entries))
