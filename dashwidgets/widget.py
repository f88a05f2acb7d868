"""ウィジェット共通基盤.

ホスト側が提供するフック (タイトル・キャッシュ期間・エラー・再取得スケジュール・
テンプレート描画) と、ホストに公開するアクセサをまとめた基底クラス。
各ウィジェットは initialize / update / render を実装する。
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from dashwidgets.errors import NetworkError

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

# 早期再取得の最大リトライ回数 (間隔 = 回数^2 分)
MAX_EARLY_RETRIES = 5


class UpdateContext:
    """キャンセル可能な update 呼び出しのコンテキスト.

    cancel() は別スレッドから呼ばれる想定。登録されたコールバック
    (通信中セッションの close など) を実行し、待機中の通信を中断させる。
    """

    def __init__(self, timeout: float | None = None):
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning("キャンセル処理で例外: %s", e)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """キャンセル時のコールバックを登録する.

        Returns:
            登録解除用の関数
        """
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)

                def _unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return _unregister

        callback()
        return lambda: None

    def timeout(self, default: float) -> float:
        """残り時間で頭打ちしたリクエストのタイムアウト秒数.

        Raises:
            NetworkError: 期限を過ぎている場合
        """
        if self.deadline is None:
            return default
        remaining = self.deadline - time.monotonic()
        if remaining <= 0:
            raise NetworkError("更新の制限時間を超えました")
        return min(default, remaining)

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise NetworkError("更新がキャンセルされました")

    def call(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """func を別スレッドで実行し、完了・キャンセル・期限切れのうち最初の事象まで待つ.

        キャンセル時は通信の完了を待たずに NetworkError を送出する。
        func が送出した例外は呼び出し側でそのまま送出する。
        """
        self.raise_if_cancelled()
        wake = threading.Event()
        outcome: dict[str, Any] = {}

        def _target() -> None:
            try:
                outcome["result"] = func(*args, **kwargs)
            except Exception as e:
                outcome["error"] = e
            finally:
                wake.set()

        unregister = self.on_cancel(wake.set)
        try:
            worker = threading.Thread(target=_target, name="widget-update", daemon=True)
            worker.start()
            remaining = None if self.deadline is None else max(0.0, self.deadline - time.monotonic())
            wake.wait(remaining)
        finally:
            unregister()

        self.raise_if_cancelled()
        if "error" in outcome:
            raise outcome["error"]
        if "result" not in outcome:
            raise NetworkError("更新の制限時間を超えました")
        return outcome["result"]


@dataclass
class Providers:
    """ウィジェット間で共有するリソース."""

    templates: Environment


def create_providers() -> Providers:
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    return Providers(templates=env)


class Widget:
    """ウィジェットの基底クラス."""

    widget_type = ""
    template_name = "widget-base.html"

    def __init__(self, options: dict | None = None):
        options = dict(options or {})
        self.options = options
        self.id = 0
        self.title = str(options.get("title") or "")
        self.hide_header = bool(options.get("hide-header", False))
        self.cache_duration = timedelta(0)
        self.content_available = False
        self.error: Exception | None = None
        self.notice: Exception | str | None = None
        self.next_update: datetime | None = None
        self.providers: Providers | None = None
        self.clock: Callable[[], datetime] = datetime.now
        self._retries = 0

    def int_option(self, key: str) -> int:
        """整数オプションを取り出す. 未設定・不正値は 0."""
        value = self.options.get(key)
        if value is None or isinstance(value, bool):
            return 0
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("%s: %s の値が不正なため無視します: %r", self.widget_type, key, value)
            return 0

    def str_option(self, key: str) -> str:
        value = self.options.get(key)
        return "" if value is None else str(value).strip()

    # --- ホスト側フック ---

    def with_title(self, title: str) -> Widget:
        # 設定ファイルの title を優先
        if not self.title:
            self.title = title
        return self

    def with_cache_duration(self, duration: timedelta) -> Widget:
        self.cache_duration = duration
        return self

    def with_error(self, err: Exception | None) -> Widget:
        self.error = err
        return self

    def with_notice(self, notice: Exception | str | None) -> Widget:
        # 更新成功時は None で前回の注意表示を消す
        self.notice = notice
        return self

    def schedule_early_update(self) -> Widget:
        """失敗後の早期再取得を予約する. 通常の更新予定より遅くはしない."""
        self._retries = min(self._retries + 1, MAX_EARLY_RETRIES)
        now = self.clock()
        early = now + timedelta(minutes=self._retries ** 2)
        usual = now + self.cache_duration
        self.next_update = min(early, usual)
        logger.info(
            "%s: 早期再取得を予約 (%d 回目) → %s",
            self.get_type(), self._retries, self.next_update.isoformat(timespec="seconds"),
        )
        return self

    def schedule_next_update(self) -> Widget:
        self._retries = 0
        self.next_update = self.clock() + self.cache_duration
        return self

    def requires_update(self, now: datetime | None = None) -> bool:
        if self.next_update is None:
            return True
        return (now or self.clock()) >= self.next_update

    def render_template(self, data: Any, template_name: str) -> Markup:
        if self.providers is None:
            self.providers = create_providers()
        template = self.providers.templates.get_template(template_name)
        return Markup(template.render(widget=self, data=data))

    # --- ホストに公開するアクセサ ---

    def get_type(self) -> str:
        return self.widget_type

    def get_id(self) -> int:
        return self.id

    def set_id(self, widget_id: int) -> None:
        self.id = widget_id

    def set_hide_header(self, value: bool) -> None:
        self.hide_header = value

    def set_providers(self, providers: Providers) -> None:
        self.providers = providers

    # --- 各ウィジェットで実装 ---

    def initialize(self) -> None:
        raise NotImplementedError

    def update(self, ctx: UpdateContext) -> None:
        raise NotImplementedError

    def render(self) -> Markup:
        return self.render_template(self, self.template_name)
