"""ツンドク・キラー: 積読を期限切れで煽る LINE 連携バックエンド。"""

__version__ = "0.1.0"
