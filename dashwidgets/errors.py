"""ウィジェットの例外定義."""


class WidgetError(Exception):
    """ウィジェット更新・描画時のエラーの基底クラス."""


class NetworkError(WidgetError):
    """送信失敗・タイムアウト・キャンセル."""


class HTTPStatusError(WidgetError):
    """200 以外のステータスコード."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(WidgetError):
    """JSON として不正、または想定スキーマと一致しないレスポンス."""


class APIStatusError(WidgetError):
    """API がペイロード内で失敗を返した."""


class CompletionAPIError(WidgetError):
    """チャット補完 API が error オブジェクトを返した."""


class EmptyCompletionError(WidgetError):
    """チャット補完 API の choices が空."""


class ConfigError(Exception):
    """ダッシュボード設定の不備."""
