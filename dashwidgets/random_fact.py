"""Random Fact ウィジェット.

処理フロー:
  1. キャッシュ期間内なら何もしない
  2. uselessfacts API から英語の事実を 1 件取得
  3. AI 設定 (apikey / model / apiurl) が揃っていればチャット補完 API で翻訳・補足
     失敗時は原文をそのまま使う
  4. キャッシュを差し替えて次回更新を予約
"""

from __future__ import annotations

import logging

import requests
from markupsafe import Markup

from dashwidgets.config import (
    DEFAULT_FACT_CACHE_DURATION,
    FACT_API_URL,
    FACT_REQUEST_TIMEOUT,
    FACT_SOURCE_HOST,
    REWRITE_MAX_TOKENS,
    parse_duration,
)
from dashwidgets.errors import (
    CompletionAPIError,
    ConfigError,
    DecodeError,
    EmptyCompletionError,
    HTTPStatusError,
    NetworkError,
    WidgetError,
)
from dashwidgets.models import FactRecord, FactSnapshot, RawFact
from dashwidgets.prompts import FACT_REWRITE_SYSTEM_PROMPT
from dashwidgets.widget import UpdateContext, Widget

logger = logging.getLogger(__name__)


def extract_model_name(model: str) -> str:
    """モデル ID から表示名を取り出す. 例: "Qwen/Qwen3-8B" → "Qwen3-8B"."""
    if not model:
        return "unknown"
    return model.rsplit("/", 1)[-1]


def build_rewrite_payload(model: str, text: str) -> dict:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": FACT_REWRITE_SYSTEM_PROMPT},
            {"role": "user", "content": text},
        ],
        "stream": False,
        "max_tokens": REWRITE_MAX_TOKENS,
        "response_format": {"type": "text"},
    }


def _send(
    session: requests.Session, ctx: UpdateContext, method: str, url: str, **kwargs
) -> requests.Response:
    """キャンセル可能なリクエスト送信. 200 以外は HTTPStatusError."""
    ctx.raise_if_cancelled()
    unregister = ctx.on_cancel(session.close)
    try:
        resp = ctx.call(
            session.request, method, url, timeout=ctx.timeout(FACT_REQUEST_TIMEOUT), **kwargs
        )
    except requests.RequestException as e:
        raise NetworkError(f"リクエスト失敗: {url}: {e}") from e
    finally:
        unregister()
    ctx.raise_if_cancelled()

    if resp.status_code != 200:
        raise HTTPStatusError(
            f"API がステータスコード {resp.status_code} を返しました: {url}", resp.status_code
        )
    return resp


def fetch_raw_fact(session: requests.Session, ctx: UpdateContext) -> RawFact:
    """uselessfacts API から事実を 1 件取得する."""
    resp = _send(session, ctx, "GET", FACT_API_URL, headers={"Accept": "application/json"})
    try:
        payload = resp.json()
    except ValueError as e:
        raise DecodeError(f"事実データの JSON パース失敗: {e}") from e
    return RawFact.from_dict(payload)


def rewrite_fact(
    session: requests.Session,
    ctx: UpdateContext,
    text: str,
    *,
    api_url: str,
    api_key: str,
    model: str,
) -> str:
    """チャット補完 API で事実を翻訳・補足する.

    Returns:
        最初の choice の message.content (加工せずそのまま)

    Raises:
        NetworkError / HTTPStatusError / DecodeError / CompletionAPIError / EmptyCompletionError
    """
    resp = _send(
        session,
        ctx,
        "POST",
        api_url,
        json=build_rewrite_payload(model, text),
        headers={
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        },
    )
    try:
        payload = resp.json()
    except ValueError as e:
        raise DecodeError(f"AI レスポンスの JSON パース失敗: {e}") from e
    if not isinstance(payload, dict):
        raise DecodeError("AI レスポンスが JSON オブジェクトではありません")

    error = payload.get("error")
    if error:
        message = error.get("message", "") if isinstance(error, dict) else str(error)
        raise CompletionAPIError(f"AI API エラー: {message}")

    choices = payload.get("choices") or []
    if not isinstance(choices, list):
        raise DecodeError("choices が配列ではありません")
    if not choices:
        raise EmptyCompletionError("AI レスポンスに choices がありません")

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise DecodeError("choices[0].message.content が文字列ではありません")
    return content


class RandomFactWidget(Widget):
    """英語の豆知識を (必要なら AI で翻訳して) 表示するパネル."""

    widget_type = "random-fact"
    template_name = "random-fact.html"

    def __init__(self, options: dict | None = None):
        super().__init__(options)
        self.api_key = self.str_option("apikey")
        self.model = self.str_option("model")
        self.api_url = self.str_option("apiurl")
        self.rewrite_enabled = False
        self.session: requests.Session | None = None
        self.snapshot: FactSnapshot | None = None

    @property
    def cached_data(self) -> FactRecord | None:
        return self.snapshot.record if self.snapshot else None

    def initialize(self) -> None:
        self.with_title("Random Fact")

        try:
            duration = parse_duration(self.options.get("cache-duration"))
        except ConfigError as e:
            logger.warning("cache-duration を無視してデフォルトを使います: %s", e)
            duration = DEFAULT_FACT_CACHE_DURATION
        if duration.total_seconds() <= 0:
            duration = DEFAULT_FACT_CACHE_DURATION
        self.with_cache_duration(duration)

        self.rewrite_enabled = bool(self.api_key and self.model and self.api_url)
        if not self.rewrite_enabled:
            logger.info("AI API が未設定のため、原文のみ表示します")

        self.session = requests.Session()

    def update(self, ctx: UpdateContext) -> None:
        now = self.clock()
        if self.snapshot is not None and now - self.snapshot.fetched_at < self.cache_duration:
            return

        if self.session is None:
            self.session = requests.Session()

        try:
            raw = fetch_raw_fact(self.session, ctx)
        except WidgetError as e:
            logger.error("事実データの取得失敗: %s", e)
            self.with_error(e).schedule_early_update()
            return

        content = raw.text
        rewrite_error: WidgetError | None = None
        if self.rewrite_enabled:
            source = extract_model_name(self.model)
            try:
                content = rewrite_fact(
                    self.session,
                    ctx,
                    raw.text,
                    api_url=self.api_url,
                    api_key=self.api_key,
                    model=self.model,
                )
            except WidgetError as e:
                # キャンセルは書き換え失敗ではなく更新自体の失敗
                if ctx.cancelled:
                    logger.error("事実データの更新がキャンセルされました")
                    self.with_error(e).schedule_early_update()
                    return
                logger.warning("AI 書き換え失敗、原文を使います: %s", e)
                rewrite_error = e
        else:
            source = FACT_SOURCE_HOST

        record = FactRecord(fact_id=raw.id, fact_text=raw.text, content=content, source=source)
        self.snapshot = FactSnapshot(record=record, fetched_at=self.clock())
        self.with_error(None).with_notice(rewrite_error).schedule_next_update()
        logger.info("事実データを更新: id=%s, source=%s", record.fact_id, record.source)

    def render(self) -> Markup:
        if self.snapshot is None:
            logger.info("表示できるデータがありません")
            self.content_available = False
            self.with_error(WidgetError("no data available"))
            return self.render_template(None, "widget-base.html")

        self.content_available = True
        return self.render_template(self, self.template_name)
