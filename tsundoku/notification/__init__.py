from .line_bot import LinePushNotifier

__all__ = ["LinePushNotifier"]
