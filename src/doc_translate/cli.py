# SPDX-License-Identifier: Apache-2.0
"""
doc-translate - CLI Tool

Translates text and documents with DeepL and detects the language of text.

Usage:
    doc-translate text <text> [options]
    doc-translate document <input.pdf> [options]
    doc-translate detect <text> [options]

Examples:
    doc-translate text "Hello" -t DE
    doc-translate document scan.pdf -t FR -o scan_fr.pdf
    doc-translate detect "Guten Morgen" --method api
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
from typing import NoReturn

from doc_translate.config import ClientConfig
from doc_translate.deepl.client import DeepLClient
from doc_translate.deepl.languages import is_valid_api_key
from doc_translate.errors import DocTranslateError
from doc_translate.jobs.coordinator import DocumentJobCoordinator
from doc_translate.language.detector import DetectionMethod, LanguageDetector
from doc_translate.network.executor import RequestExecutor
from doc_translate.network.transport import AiohttpTransport

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument Namespace.
    """
    parser = argparse.ArgumentParser(
        prog="doc-translate",
        description="Translate text and documents with DeepL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  DEEPL_API_KEY                DeepL API key (":fx" suffix = free account)
  DEEPL_API_URL                API base URL override
  DOC_TRANSLATE_TIMEOUT        Timeout per HTTP request in seconds (default: 30)
  DOC_TRANSLATE_MAX_RETRIES    Retries for 429/5xx responses (default: 3)
  DOC_TRANSLATE_POLL_INTERVAL  Seconds between document status polls (default: 2)
  DOC_TRANSLATE_MAX_POLLS      Maximum document status polls (default: 300)
  DOC_TRANSLATE_POLL_TIMEOUT   Give up polling after this many seconds (default: none)
  DOC_TRANSLATE_OUTPUT_DIR     Directory for downloaded documents (default: system temp)
""",
    )
    parser.add_argument(
        "--api-key",
        help="DeepL API key (or set DEEPL_API_KEY)",
    )
    parser.add_argument(
        "--api-url",
        help="DeepL API base URL (default: chosen by account tier)",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        help="Maximum retries for rate-limited or failed requests",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    text_parser = subparsers.add_parser("text", help="Translate a text")
    text_parser.add_argument("text", help="Text to translate")
    text_parser.add_argument(
        "-t",
        "--target",
        default="EN",
        help="Target language code (default: EN)",
    )
    text_parser.add_argument(
        "-s",
        "--source",
        help="Source language code (default: auto-detect)",
    )
    text_parser.add_argument(
        "--no-preserve-formatting",
        action="store_true",
        help="Let DeepL normalize formatting",
    )

    doc_parser = subparsers.add_parser("document", help="Translate a PDF document")
    doc_parser.add_argument("input", type=Path, help="Path to PDF file to translate")
    doc_parser.add_argument(
        "-t",
        "--target",
        default="EN",
        help="Target language code (default: EN)",
    )
    doc_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output file path (default: <input>_<target>.pdf)",
    )
    doc_parser.add_argument(
        "--poll-timeout",
        type=float,
        help="Give up polling after this many seconds",
    )

    detect_parser = subparsers.add_parser("detect", help="Detect the language of a text")
    detect_parser.add_argument("text", help="Text sample")
    detect_parser.add_argument(
        "--method",
        default="local",
        choices=[method.value for method in DetectionMethod],
        help="Detection method to try first (default: local)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ClientConfig:
    """Merge environment configuration with command line overrides."""
    config = ClientConfig.from_env()
    overrides: dict[str, object] = {}
    if args.api_key:
        overrides["api_key"] = args.api_key.strip()
    if args.api_url:
        overrides["base_url"] = args.api_url
    if args.max_retries is not None:
        overrides["max_retries"] = args.max_retries
    if getattr(args, "poll_timeout", None) is not None:
        overrides["poll_timeout"] = args.poll_timeout
    return replace(config, **overrides) if overrides else config


def default_output_path(input_path: Path, target: str) -> Path:
    return input_path.with_name(f"{input_path.stem}_{target.lower()}{input_path.suffix}")


async def _translate_text(args: argparse.Namespace, client: DeepLClient) -> int:
    result = await client.translate_text(
        args.text,
        args.target,
        source_lang=args.source,
        preserve_formatting=not args.no_preserve_formatting,
    )
    print(result.text)
    print(f"Detected source: {result.detected_source_language}", file=sys.stderr)
    return 0


async def _translate_document(
    args: argparse.Namespace,
    client: DeepLClient,
    config: ClientConfig,
) -> int:
    input_path: Path = args.input
    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1
    if input_path.suffix.lower() != ".pdf":
        print(f"Error: Not a PDF file: {input_path}", file=sys.stderr)
        return 1

    output_path: Path = args.output or default_output_path(input_path, args.target)
    print(f"Input: {input_path}")
    print(f"Output: {output_path}")
    print(f"Target: {args.target.upper()}")

    try:
        payload = input_path.read_bytes()
    except OSError as e:
        print(f"Error: Cannot read {input_path}: {e}", file=sys.stderr)
        return 1

    coordinator = DocumentJobCoordinator(client, config)
    result_path = await coordinator.translate_document(
        payload, args.target, filename=input_path.name
    )
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(result_path), output_path)
    except OSError as e:
        result_path.unlink(missing_ok=True)
        print(f"Error: Cannot write {output_path}: {e}", file=sys.stderr)
        return 1
    print(f"Complete: {output_path}")
    return 0


async def _detect(
    args: argparse.Namespace,
    executor: RequestExecutor,
    config: ClientConfig,
) -> int:
    detector = LanguageDetector(executor, base_url=config.base_url)
    result = await detector.detect(
        args.text,
        api_key=config.api_key or None,
        preferred=DetectionMethod(args.method),
    )
    name = result.display_name or "unknown"
    print(f"{result.language_code} ({name}) confidence={result.confidence:.2f} via {result.method.value}")
    return 0


async def run(args: argparse.Namespace) -> int:
    """Execute the selected command.

    Args:
        args: Command line arguments.

    Returns:
        Exit code (0: success, 1: failure).
    """
    try:
        config = build_config(args)
    except DocTranslateError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command != "detect" and not config.api_key:
        print(
            "Error: DeepL API key is required.\n"
            "  Set --api-key option or DEEPL_API_KEY environment variable.",
            file=sys.stderr,
        )
        return 1
    if config.api_key and not is_valid_api_key(config.api_key):
        logger.warning("API key does not look like a DeepL key; trying anyway")

    async with AiohttpTransport(timeout=config.timeout) as transport:
        executor = RequestExecutor(
            transport,
            max_retries=config.max_retries,
            backoff_base=config.backoff_base,
        )
        try:
            if args.command == "detect":
                return await _detect(args, executor, config)
            client = DeepLClient(config.api_key, executor, base_url=config.base_url)
            if args.command == "text":
                return await _translate_text(args, client)
            return await _translate_document(args, client, config)
        except DocTranslateError as e:
            print(f"Error: {e}", file=sys.stderr)
            if args.verbose:
                import traceback

                traceback.print_exc()
            return 1
        finally:
            executor.cancel_all()


def main() -> NoReturn:
    """Main entry point."""
    args = parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    exit_code = asyncio.run(run(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
