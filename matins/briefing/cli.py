"""Render briefing documents from a JSON file of classified project inputs."""

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import os
import sys
import typing as typ
from pathlib import Path

import msgspec

from matins.channels.chat import format_chat_payload
from matins.channels.email import build_email_message, format_email, parse_recipients
from matins.generation.errors import GeneratorConfigError
from matins.generation.factory import create_document_generator
from matins.generation.observability import BriefingEventLogger
from matins.issues.models import decode_project_inputs
from matins.logging import configure_logging, get_logger, log_warning
from matins.rendering.html import markdown_to_html
from matins.rendering.plain_text import markdown_to_plain_text

from .config import BriefingConfig
from .errors import BriefingConfigError
from .service import BriefingDependencies, BriefingService

if typ.TYPE_CHECKING:
    from matins.document.models import Document
    from matins.generation.protocol import DocumentGenerator
    from matins.issues.models import ProjectDocumentInput

logger = get_logger(__name__)

_FORMATS = ("markdown", "html", "text", "chat", "email")
_SEPARATOR = "\n"


def _parse_at(value: str) -> dt.datetime:
    """Parse ``--at``, requiring timezone information."""
    parsed = dt.datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        msg = (
            f"--at must include timezone information, got naive datetime: {value!r}. "
            "Use ISO format with offset (e.g., '2024-01-20T00:00:00Z')."
        )
        raise argparse.ArgumentTypeError(msg)
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="matins-render", description=__doc__)
    parser.add_argument(
        "input",
        help="JSON array of project inputs, or '-' to read standard input",
    )
    parser.add_argument(
        "--format",
        choices=_FORMATS,
        default="markdown",
        help="Rendering printed to standard output (default: markdown)",
    )
    parser.add_argument(
        "--at",
        type=_parse_at,
        default=None,
        help="Generation timestamp in ISO format with offset (default: now)",
    )
    parser.add_argument(
        "--sender",
        default=os.environ.get("MATINS_EMAIL_FROM", ""),
        help="From address for --format email (default: $MATINS_EMAIL_FROM)",
    )
    parser.add_argument(
        "--to",
        default=os.environ.get("MATINS_EMAIL_RECIPIENTS", ""),
        help="Comma-separated recipients for --format email "
        "(default: $MATINS_EMAIL_RECIPIENTS)",
    )
    return parser


def _read_input(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


async def _render_all(
    generator: DocumentGenerator | None,
    config: BriefingConfig,
    projects: list[ProjectDocumentInput],
    generated_at: dt.datetime | None,
) -> list[Document]:
    service = BriefingService(
        BriefingDependencies(generator=generator, event_logger=BriefingEventLogger()),
        config=config,
    )
    try:
        outcomes = await service.render_batch(projects, generated_at=generated_at)
    finally:
        aclose = getattr(generator, "aclose", None)
        if aclose is not None:
            await aclose()
    return [outcome.document for outcome in outcomes]


def _format_documents(
    documents: list[Document],
    args: argparse.Namespace,
    config: BriefingConfig,
) -> str:
    """Render ``documents`` in the requested output format."""
    match args.format:
        case "html":
            parts = [markdown_to_html(document.content) for document in documents]
        case "text":
            parts = [markdown_to_plain_text(document.content) for document in documents]
        case "chat":
            payloads = [format_chat_payload(document) for document in documents]
            return msgspec.json.encode(payloads).decode("utf-8")
        case "email":
            recipients = parse_recipients(args.to)
            parts = [
                build_email_message(
                    format_email(document, config.document_config),
                    sender=args.sender,
                    recipients=recipients,
                ).as_string()
                for document in documents
            ]
        case _:
            parts = [document.content for document in documents]
    return _SEPARATOR.join(parts)


def main(argv: list[str] | None = None) -> int:
    """Render every project in the input file and print the result.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when the input or configuration is invalid.

    """
    args = _build_parser().parse_args(argv)

    log_level = os.environ.get("MATINS_LOG_LEVEL", "INFO")
    normalized_level, invalid_level = configure_logging(log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid MATINS_LOG_LEVEL %r, falling back to %s",
            log_level,
            normalized_level,
        )

    if args.format == "email" and not (args.sender and parse_recipients(args.to)):
        print("--format email requires --sender and --to", file=sys.stderr)
        return 1

    try:
        projects = decode_project_inputs(_read_input(args.input))
    except OSError as exc:
        print(f"Cannot read {args.input}: {exc}", file=sys.stderr)
        return 1
    except msgspec.DecodeError as exc:
        print(f"Invalid project input in {args.input}: {exc}", file=sys.stderr)
        return 1

    try:
        config = BriefingConfig.from_env()
        generator = create_document_generator()
    except (BriefingConfigError, GeneratorConfigError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    documents = asyncio.run(_render_all(generator, config, projects, args.at))
    print(_format_documents(documents, args, config))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
