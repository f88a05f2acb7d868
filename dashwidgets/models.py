"""データモデル定義."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any

from dashwidgets.errors import DecodeError

# 微博のカテゴリ名 → 1 文字略称
CATEGORY_ABBREVIATIONS = MappingProxyType({
    "娱乐": "娱",
    "社会": "社",
    "科技": "科",
    "体育": "体",
    "财经": "财",
    "热点": "热",
    "军事": "军",
    "国际": "国",
    "历史": "史",
    "美食": "食",
})


def _get(data: dict, key: str, kind: type, default: Any) -> Any:
    """JSON オブジェクトから型を確認しつつ値を取り出す.

    キーが無い・null の場合は default。型が違う場合は DecodeError。
    """
    value = data.get(key)
    if value is None:
        return default
    # bool は int のサブクラスなので別扱い
    if isinstance(value, bool) and kind is not bool:
        raise DecodeError(f"{key} の型が不正です: {value!r}")
    if not isinstance(value, kind):
        raise DecodeError(f"{key} の型が不正です: {value!r}")
    return value


@dataclass(frozen=True)
class HotSearchItem:
    """微博ホット検索の 1 項目を表す."""

    word: str  # 表示キーワード
    word_scheme: str = ""  # 検索用に整形されたキーワード (例: #話題#)
    num: int = 0  # 熱度
    label_name: str = ""  # カテゴリ (例: 娱乐)
    note: str = ""
    rank: int = 0
    realpos: int = 0
    flag: int = 0
    flag_desc: str = ""
    icon: str = ""
    icon_width: int = 0
    icon_height: int = 0
    icon_desc: str = ""  # 例: 热 / 新 / 沸
    icon_desc_color: str = ""
    small_icon_desc: str = ""
    small_icon_desc_color: str = ""
    emoticon: str = ""
    topic_flag: int = 0
    is_ad: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> HotSearchItem:
        """API の JSON オブジェクトから生成する. 未知のフィールドは無視."""
        if not isinstance(data, dict):
            raise DecodeError(f"ホット検索項目がオブジェクトではありません: {data!r}")

        return cls(
            word=_get(data, "word", str, ""),
            word_scheme=_get(data, "word_scheme", str, ""),
            num=_get(data, "num", int, 0),
            label_name=_get(data, "label_name", str, ""),
            note=_get(data, "note", str, ""),
            rank=_get(data, "rank", int, 0),
            realpos=_get(data, "realpos", int, 0),
            flag=_get(data, "flag", int, 0),
            flag_desc=_get(data, "flag_desc", str, ""),
            icon=_get(data, "icon", str, ""),
            icon_width=_get(data, "icon_width", int, 0),
            icon_height=_get(data, "icon_height", int, 0),
            icon_desc=_get(data, "icon_desc", str, ""),
            icon_desc_color=_get(data, "icon_desc_color", str, ""),
            small_icon_desc=_get(data, "small_icon_desc", str, ""),
            small_icon_desc_color=_get(data, "small_icon_desc_color", str, ""),
            emoticon=_get(data, "emoticon", str, ""),
            topic_flag=_get(data, "topic_flag", int, 0),
            is_ad=_get(data, "is_ad", int, 0),
        )

    def formatted_hot_value(self) -> str:
        """熱度を 1.5K / 2.5M 形式で返す."""
        if self.num >= 1_000_000:
            return f"{self.num / 1_000_000:.1f}M"
        if self.num >= 1_000:
            return f"{self.num / 1_000:.1f}K"
        return str(self.num)

    def category_display_name(self) -> str:
        """カテゴリの略称を返す. 対応表に無ければそのまま."""
        return CATEGORY_ABBREVIATIONS.get(self.label_name, self.label_name)


@dataclass(frozen=True)
class HotSearchEntry:
    """表示用: ホット検索項目と検索ページ URL の組."""

    item: HotSearchItem
    url: str


@dataclass(frozen=True)
class HotSearchSnapshot:
    """最後に取得に成功したホット検索一覧."""

    entries: tuple[HotSearchEntry, ...]
    last_updated: datetime


@dataclass(frozen=True)
class RawFact:
    """uselessfacts API のレスポンス."""

    id: str
    text: str
    source: str = ""
    source_url: str = ""
    language: str = ""
    permalink: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> RawFact:
        if not isinstance(data, dict):
            raise DecodeError(f"事実データがオブジェクトではありません: {data!r}")

        text = _get(data, "text", str, "")
        if not text.strip():
            raise DecodeError("事実データに text がありません")

        return cls(
            id=_get(data, "id", str, ""),
            text=text,
            source=_get(data, "source", str, ""),
            source_url=_get(data, "source_url", str, ""),
            language=_get(data, "language", str, ""),
            permalink=_get(data, "permalink", str, ""),
        )


@dataclass(frozen=True)
class FactRecord:
    """表示する 1 件の事実."""

    fact_id: str
    fact_text: str  # 英語の原文
    content: str  # 表示テキスト (AI で書き換え済みの場合あり)
    source: str  # モデル名 または 提供元ホスト名


@dataclass(frozen=True)
class FactSnapshot:
    """キャッシュ中の事実と取得時刻."""

    record: FactRecord
    fetched_at: datetime
