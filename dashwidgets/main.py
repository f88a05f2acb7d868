"""ダッシュボード — メインエントリーポイント.

処理フロー:
  1. YAML 設定からウィジェットを生成・初期化
  2. 更新が必要なウィジェットの update を順に実行
  3. 全ウィジェットを描画して 1 枚の HTML に書き出す
  4. --once 指定が無ければ interval 秒ごとに 2〜3 を繰り返す
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
import time
from datetime import datetime
from pathlib import Path

from dashwidgets.config import LOG_DIR, load_dashboard_config
from dashwidgets.errors import ConfigError
from dashwidgets.random_fact import RandomFactWidget
from dashwidgets.weibo import WeiboWidget
from dashwidgets.widget import Providers, UpdateContext, Widget, create_providers

logger = logging.getLogger(__name__)

WIDGET_TYPES: dict[str, type[Widget]] = {
    WeiboWidget.widget_type: WeiboWidget,
    RandomFactWidget.widget_type: RandomFactWidget,
}

# 1 回の update に許す最大秒数
UPDATE_TIMEOUT = 60


def setup_logging() -> None:
    """ロギングの初期設定."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / f"dashwidgets_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def build_widgets(configs: list[dict], providers: Providers) -> list[Widget]:
    """設定からウィジェットを生成して初期化する.

    Raises:
        ConfigError: 未知の type が含まれる場合
    """
    widgets: list[Widget] = []
    for widget_id, options in enumerate(configs, start=1):
        widget_type = options["type"]
        widget_cls = WIDGET_TYPES.get(widget_type)
        if widget_cls is None:
            raise ConfigError(f"未知のウィジェット type: {widget_type}")

        widget = widget_cls(options)
        widget.set_id(widget_id)
        widget.set_providers(providers)
        widget.initialize()
        widgets.append(widget)
        logger.info("ウィジェット初期化: id=%d, type=%s", widget_id, widget_type)

    return widgets


def update_widgets(widgets: list[Widget], ctx: UpdateContext) -> int:
    """更新が必要なウィジェットだけ update する.

    Returns:
        update を呼んだウィジェット数
    """
    now = datetime.now()
    updated = 0
    for widget in widgets:
        if ctx.cancelled:
            break
        if not widget.requires_update(now):
            continue
        widget.update(ctx)
        updated += 1
    return updated


def render_page(widgets: list[Widget], providers: Providers, title: str = "Dashboard") -> str:
    fragments = [widget.render() for widget in widgets]
    template = providers.templates.get_template("page.html")
    return template.render(
        title=title,
        fragments=fragments,
        generated_at=datetime.now().isoformat(timespec="seconds"),
    )


def write_page(html: str, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    # 描画途中のファイルを読まれないよう置き換えで書き込む
    tmp = output.with_suffix(output.suffix + ".tmp")
    tmp.write_text(html, encoding="utf-8")
    tmp.replace(output)


def run_cycle(widgets: list[Widget], providers: Providers, output: Path, ctx: UpdateContext) -> None:
    """更新 → 描画 → 書き出しを 1 回行う."""
    start_time = time.time()
    updated = update_widgets(widgets, ctx)
    write_page(render_page(widgets, providers), output)

    errors = sum(1 for w in widgets if w.error is not None)
    logger.info(
        "サイクル完了: 更新 %d 件, エラー %d 件, 所要時間 %.1f 秒 → %s",
        updated, errors, time.time() - start_time, output,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="微博ホット検索 / Random Fact ダッシュボード")
    parser.add_argument("--config", default="dashboard.yaml", help="ダッシュボード設定ファイル (YAML)")
    parser.add_argument("--output", default="output/dashboard.html", help="HTML 出力ファイル")
    parser.add_argument("--once", action="store_true", help="1 回だけ更新して終了")
    parser.add_argument("--interval", type=int, default=60, help="更新確認の間隔 (秒)")
    return parser


def run(argv: list[str] | None = None) -> int:
    """メイン処理."""
    args = build_parser().parse_args(argv)
    setup_logging()
    logger.info("=== ダッシュボード 開始 ===")

    try:
        configs = load_dashboard_config(args.config)
        providers = create_providers()
        widgets = build_widgets(configs, providers)
    except ConfigError as e:
        logger.error("設定エラー: %s", e)
        return 1

    output = Path(args.output)
    stop = threading.Event()
    current: dict[str, UpdateContext] = {}

    def _signal_handler(signum, frame):
        logger.info("シグナル %s を受信、終了します", signum)
        stop.set()
        if "ctx" in current:
            current["ctx"].cancel()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    while not stop.is_set():
        ctx = UpdateContext(timeout=UPDATE_TIMEOUT)
        current["ctx"] = ctx
        run_cycle(widgets, providers, output, ctx)
        if args.once:
            break
        stop.wait(args.interval)

    logger.info("=== ダッシュボード 終了 ===")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
