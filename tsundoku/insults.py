# tsundoku/insults.py
"""
固定文プールから煽り文を選ぶ生成器。

`generate(book)` を持つオブジェクトなら何でも煽り文生成器として扱える
（Gemini 版は tsundoku.llm.client_gemini.GeminiInsultWriter）。
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence

from tsundoku.config.llm import INSULT_MODE_GEMINI, INSULT_MODE_STATIC, InsultConfig
from tsundoku.errors import ConfigurationError
from tsundoku.models import Book

# "{title}" は本のタイトルに置き換える
INSULT_TEMPLATES: Sequence[str] = (
    "その本、いつ読むの？もうオブジェになってない？w",
    "積読タワー建設中？完成披露パーティーはいつですか？（早く読め）",
    "買った時の情熱、どこいった〜？🔥 本が泣いてるよ！",
    "「{title}」が本棚の飾りになってるって噂、本当だったんだね…",
    "読書、今日からじゃなくて今から始めよっか！",
    "その本、インテリアにするにはちょっと高いんじゃない？笑",
    "大丈夫、まだ間に合う！その本を手に取って最初の1ページを開くだけでいい！",
)


class StaticInsultPool:
    """固定の煽り文から一様ランダムに 1 つ選ぶ。"""

    def __init__(
        self,
        templates: Optional[Sequence[str]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.templates: List[str] = list(templates or INSULT_TEMPLATES)
        if not self.templates:
            raise ConfigurationError("insult template pool is empty")
        self._rng = rng or random.Random()

    def generate(self, book: Book) -> str:
        template = self._rng.choice(self.templates)
        # str.format だとタイトル中の波括弧で落ちるため単純置換
        return template.replace("{title}", book.title)


def build_insult_writer(cfg: InsultConfig):
    """設定の mode に応じて煽り文生成器を返す。"""
    if cfg.mode == INSULT_MODE_STATIC:
        return StaticInsultPool()
    if cfg.mode == INSULT_MODE_GEMINI:
        from tsundoku.llm.client_gemini import GeminiInsultWriter

        return GeminiInsultWriter(cfg)
    raise ConfigurationError(f"unknown INSULT_MODE: {cfg.mode}")
