#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0
"""文書翻訳サンプルスクリプト

このスクリプトはdoc-translateの基本的な使い方を示します。
設定変数を変更して、テキスト翻訳・言語検出・PDF翻訳を試すことができます。

Usage:
    cd examples
    python translate_document.py

環境変数（.envファイルから自動読み込み）:
    DEEPL_API_KEY: DeepL翻訳に必要（":fx" で終わるキーはFree API）
    DOC_TRANSLATE_MAX_RETRIES: 429/5xx時のリトライ回数（デフォルト: 3）
    DOC_TRANSLATE_POLL_INTERVAL: 文書ステータス確認の間隔（デフォルト: 2秒）
"""

from __future__ import annotations

import asyncio
import shutil
import sys
from pathlib import Path

from dotenv import load_dotenv

# プロジェクトルートをパスに追加（開発時用）
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

# Load .env file from project root (DEEPL_API_KEY, etc.)
load_dotenv(PROJECT_ROOT / ".env")


# =============================================================================
# 設定変数 - ここを変更して動作をカスタマイズ
# =============================================================================

# 翻訳先の言語: EN, DE, FR, IT, ES, PT, NL, PL, RU, JA, ZH
TARGET_LANG = "JA"

# テキスト翻訳のサンプル
SAMPLE_TEXT = "The quick brown fox jumps over the lazy dog."

# 言語検出の優先方式: "local" | "api"
# - local: langdetectで端末内検出、失敗時のみAPI
# - api: DeepL APIを優先、失敗時はlocalにフォールバック
DETECTION_METHOD = "local"

# PDF翻訳（Noneならスキップ）
INPUT_PDF: Path | None = None
OUTPUT_DIR = Path(__file__).parent / "outputs"

# =============================================================================
# メイン処理（通常は変更不要）
# =============================================================================


async def main() -> None:
    """メイン処理。"""
    from doc_translate import (
        AiohttpTransport,
        ClientConfig,
        DeepLClient,
        DetectionMethod,
        DocumentJobCoordinator,
        LanguageDetector,
        RequestExecutor,
    )

    config = ClientConfig.from_env()
    if not config.api_key:
        print("Error: DEEPL_API_KEY environment variable is not set")
        print("Set it with: export DEEPL_API_KEY='your-api-key'")
        sys.exit(1)

    print("=" * 60)
    print("Document Translation Example")
    print("=" * 60)
    print(f"API tier:    {'free' if config.is_free_tier else 'pro'}")
    print(f"Target:      {TARGET_LANG}")
    print(f"Detection:   {DETECTION_METHOD}")
    print(f"Input PDF:   {INPUT_PDF}")
    print("=" * 60)

    async with AiohttpTransport(timeout=config.timeout) as transport:
        executor = RequestExecutor(
            transport,
            max_retries=config.max_retries,
            backoff_base=config.backoff_base,
        )
        client = DeepLClient(config.api_key, executor, base_url=config.base_url)

        # 言語検出
        detector = LanguageDetector(executor, base_url=config.base_url)
        detection = await detector.detect(
            SAMPLE_TEXT,
            api_key=config.api_key,
            preferred=DetectionMethod(DETECTION_METHOD),
        )
        print(
            f"\nDetected:    {detection.display_name or detection.language_code} "
            f"({detection.confidence:.2f}, {detection.method.value})"
        )

        # テキスト翻訳
        translation = await client.translate_text(SAMPLE_TEXT, TARGET_LANG)
        print(f"Translated:  {translation.text}")

        # PDF翻訳
        if INPUT_PDF is not None:
            if not INPUT_PDF.exists():
                print(f"Error: Input PDF not found: {INPUT_PDF}")
                sys.exit(1)

            OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
            coordinator = DocumentJobCoordinator(client, config)

            print("\nTranslating PDF...")
            result_path = await coordinator.translate_document(
                INPUT_PDF.read_bytes(), TARGET_LANG, filename=INPUT_PDF.name
            )
            output_pdf = OUTPUT_DIR / f"{INPUT_PDF.stem}_{TARGET_LANG.lower()}.pdf"
            shutil.move(str(result_path), output_pdf)
            print(f"Output file: {output_pdf}")
            print(f"File size:   {output_pdf.stat().st_size / 1024:.1f} KB")

    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
