# tsundoku/config/llm.py
from __future__ import annotations

from dataclasses import dataclass

from tsundoku.config import env_str

INSULT_MODE_STATIC = "static"
INSULT_MODE_GEMINI = "gemini"


@dataclass
class InsultConfig:
    """煽り文の生成方式と Gemini 呼び出し設定。

    - mode: "static"（固定文からランダム）/ "gemini"（生成 API）
    - リトライは行わない。失敗時は固定文で補完する。
    """

    mode: str = INSULT_MODE_STATIC
    gemini_api_key: str = ""
    model: str = "gemini-2.5-flash-lite"
    temperature: float = 0.9
    max_output_tokens: int = 256

    @classmethod
    def from_env(cls) -> "InsultConfig":
        mode = env_str("INSULT_MODE", INSULT_MODE_STATIC).lower() or INSULT_MODE_STATIC
        return cls(
            mode=mode,
            gemini_api_key=env_str("GEMINI_API_KEY"),
            model=env_str("GEMINI_MODEL", cls.model) or cls.model,
        )
