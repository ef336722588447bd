# main.py
"""
バックエンドサーバの起動スクリプト。

実行方法:
    リポジトリのルートで `python main.py`（既定ポート 8081）。
    必要な環境変数は .env に書いてもよい（README 参照）。
"""

import logging

from tsundoku.config import load_env
from tsundoku.config.settings import Settings
from tsundoku.services import build_services
from webapp.app import create_app


def main():
    load_env()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = Settings.from_env()
    app = create_app(build_services(settings))

    print("=" * 50)
    print(f"ツンドク・キラー backend - port {settings.port}")
    print(f"煽りモード: {settings.insult.mode}")
    print(f"スイープ対象: {', '.join(s.value for s in settings.sweep_statuses)}")
    print("=" * 50)
    app.run(host="0.0.0.0", port=settings.port, debug=False)


if __name__ == "__main__":
    main()
