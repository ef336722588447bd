# tsundoku/llm/client_gemini.py
from __future__ import annotations

import logging
from typing import Any, List, Optional

from google import genai
from google.genai import types

from tsundoku.config.llm import InsultConfig
from tsundoku.errors import ConfigurationError
from tsundoku.models import Book

logger = logging.getLogger(__name__)

FALLBACK_INSULT = "期限、とっくに過ぎてるよ？その本、そろそろ開いてあげて。"

# 煽りレベル → プロンプト内の口調指示
LEVEL_TONES = {
    1: "やさしく、励ますような口調で",
    2: "ちょっとだけ煽る口調で",
    3: "普通に煽る口調で",
    4: "かなり辛辣に煽る口調で",
    5: "容赦なく鬼のように煽る口調で（ただし人格攻撃や差別表現は禁止）",
}


class GeminiInsultWriter:
    """Google AI (Gemini) で煽り文を 1 つ生成する薄いラッパ。

    - リトライはしない。空応答や API 失敗時は FALLBACK_INSULT を返す。
    - client は差し替え可能（テストではダミーを渡す）。
    """

    def __init__(self, cfg: Optional[InsultConfig] = None, client: Any = None) -> None:
        self.cfg = cfg or InsultConfig()
        if client is None:
            if not self.cfg.gemini_api_key:
                raise ConfigurationError("GEMINI_API_KEY is not set")
            client = genai.Client(api_key=self.cfg.gemini_api_key)
        self.client = client
        self.model = self.cfg.model

        self._gen_config = types.GenerateContentConfig(
            temperature=self.cfg.temperature,
            max_output_tokens=self.cfg.max_output_tokens,
        )

    def _build_prompt(self, book: Book) -> str:
        """本の情報から日本語プロンプトを構築する補助関数"""
        tone = LEVEL_TONES.get(book.insult_level, LEVEL_TONES[3])
        lines: List[str] = []
        lines.append("あなたは積読を許さない読書コーチです。")
        lines.append("ユーザーは読了期限を過ぎても次の本を読んでいません。")
        lines.append(f"{tone}、LINEで送る短い一言（80文字以内）を1つだけ書いてください。")
        lines.append("前置きや引用符は不要。本文だけを出力。")
        lines.append(f"\n[タイトル] {book.title}")
        lines.append(f"[著者] {book.author}")
        lines.append(f"[煽りレベル] {book.insult_level}/5")
        return "\n".join(lines)

    def generate(self, book: Book) -> str:
        """煽り文を生成する。失敗しても例外は出さず定型文を返す。"""
        try:
            resp = self.client.models.generate_content(
                model=self.model,
                contents=self._build_prompt(book),
                config=self._gen_config,
            )
        except Exception as exc:
            logger.warning("[Gemini] generate_content failed for %s: %s", book.book_id, exc)
            return FALLBACK_INSULT

        text = _first_candidate_text(resp)
        if not text:
            logger.warning("[Gemini] empty response for %s; using fallback", book.book_id)
            return FALLBACK_INSULT
        return text


def _first_candidate_text(resp: Any) -> str:
    """レスポンスの先頭候補からテキストを取り出す。無ければ空文字。"""
    cand = (getattr(resp, "candidates", None) or [None])[0]
    content = getattr(cand, "content", None) if cand else None
    parts = getattr(content, "parts", None) or []
    texts = [getattr(p, "text", None) or "" for p in parts]
    text = "".join(texts).strip()
    if not text:
        # candidates が空でも .text だけ返ってくる実装に備える
        text = (getattr(resp, "text", None) or "").strip()
    return text
