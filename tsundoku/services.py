# tsundoku/services.py
"""
実行時に使うサービス一式の組み立て。

Firebase Admin アプリと Firestore クライアントはここで 1 度だけ作り、
各サービスへ明示的に渡す。HTTP 層は Services を受け取るだけで、
グローバルなクライアントは持たない。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore

from tsundoku.config.settings import Settings
from tsundoku.identity import IdentityBridge
from tsundoku.insults import build_insult_writer
from tsundoku.notification.line_bot import LinePushNotifier
from tsundoku.registry import BookRegistry
from tsundoku.scheduler import QStashScheduler
from tsundoku.store.base import BookStore
from tsundoku.store.firestore_store import FirestoreBookStore
from tsundoku.sweep import DeadlineSweeper

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    store: BookStore
    registry: BookRegistry
    sweeper: DeadlineSweeper
    identity: IdentityBridge


def init_firebase(settings: Settings) -> Any:
    """サービスアカウント JSON から firebase_admin.App を初期化する。"""
    cred = credentials.Certificate(settings.firebase.service_account_info())
    return firebase_admin.initialize_app(cred)


def build_services(
    settings: Settings,
    firebase_app: Any = None,
    store: Optional[BookStore] = None,
    notifier: Optional[LinePushNotifier] = None,
) -> Services:
    """設定からサービス一式を作る。引数で渡したものはそのまま使う。"""
    if store is None:
        if firebase_app is None:
            firebase_app = init_firebase(settings)
        store = FirestoreBookStore(firestore.client(firebase_app))

    scheduler = (
        QStashScheduler(settings.qstash, cron_secret=settings.cron_secret)
        if settings.qstash.enabled
        else None
    )
    if scheduler is None:
        logger.info("[services] QStash disabled; relying on cron sweep only")

    sweeper = DeadlineSweeper(
        store=store,
        insult_writer=build_insult_writer(settings.insult),
        notifier=notifier or LinePushNotifier(settings.line),
        statuses=settings.sweep_statuses,
    )
    return Services(
        settings=settings,
        store=store,
        registry=BookRegistry(store, scheduler=scheduler),
        sweeper=sweeper,
        identity=IdentityBridge(firebase_app=firebase_app, store=store),
    )
