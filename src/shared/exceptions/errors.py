"""カスタム例外定義"""


class TripLogError(Exception):
    """トリップログ基底例外"""

    pass


class HTTPError(TripLogError):
    """HTTP関連のエラー"""

    pass


class GeocodingError(TripLogError):
    """逆ジオコーディングエラー"""

    pass


class StorageError(TripLogError):
    """ストレージ関連のエラー"""

    pass


class DuplicateError(TripLogError):
    """作成しようとしたドキュメントが既に存在する"""

    pass


class ConfigurationError(TripLogError):
    """設定エラー"""

    pass


class ValidationError(TripLogError):
    """バリデーションエラー（メッセージはそのままクライアントに返す）"""

    pass


class AuthenticationError(TripLogError):
    """認証エラー（トークンなし、またはメールアドレス・パスワードの不一致）"""

    pass


class InvalidTokenError(AuthenticationError):
    """トークンが無効または期限切れ"""

    pass


class TripStateError(TripLogError):
    """進行中トリップの状態に矛盾がある"""

    pass


class NotFoundError(TripLogError):
    """対象が見つからない"""

    pass


class ExportError(TripLogError):
    """CSVエクスポートのエラー"""

    pass
