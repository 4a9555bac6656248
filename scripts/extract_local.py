"""Local run: push one or more PDFs through the full intake pipeline.

Usage:
    uv run python scripts/extract_local.py path/to/buono.pdf [more.pdf ...] [--requester user-42]

This script:
1. Loads .env and config.yaml
2. Configures Opik tracing when OPIK_API_KEY is set
3. Builds the lifecycle manager (Tesseract OCR + configured field parser)
4. Opens one session and processes the files as a single batch
5. Prints each outcome as JSON (camelCase record fields)

Requires tesseract and poppler on PATH, plus OPENAI_API_KEY when field_parser is "llm".
"""
# ruff: noqa: E402
import asyncio
import json
import logging
import mimetypes
import os
import sys
from pathlib import Path

project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import opik
from dotenv import load_dotenv
load_dotenv(Path(project_root) / ".env")

from src.builder import IntakeBuilder
from src.config import AppConfig
from src.core.upload import UploadCandidate


def _candidate(path: Path) -> UploadCandidate:
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return UploadCandidate(content=path.read_bytes(), mime_type=mime_type, original_name=path.name)


def _configure_tracing(config: AppConfig) -> None:
    """Send @opik.track spans to Opik only when an API key is configured."""
    if not config.opik_api_key:
        os.environ.setdefault("OPIK_TRACK_DISABLE", "true")
        return
    os.environ.setdefault("OPIK_PROJECT_NAME", config.opik_project)
    opik.configure(api_key=config.opik_api_key, workspace=config.opik_workspace, automatic_approvals=True)


async def run(paths: list[Path], requester_id: str | None) -> int:
    config = AppConfig.from_yaml(Path(project_root) / "config.yaml")
    _configure_tracing(config)
    manager = IntakeBuilder(config).build()
    manager.initialize()

    async with manager.open() as session:
        outcomes = await session.process_batch([_candidate(p) for p in paths], requester_id=requester_id)

    for outcome in outcomes:
        payload = outcome.model_dump(mode="json", by_alias=True, exclude={"result": {"raw_ocr_text"}})
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if all(o.ok for o in outcomes) else 1


def parse_args(argv: list[str]) -> tuple[list[Path], str | None] | None:
    """Split argv into PDF paths and the optional requester id. None means print usage."""
    args = list(argv)
    requester_id = None
    if "--requester" in args:
        i = args.index("--requester")
        if i + 1 >= len(args):
            return None
        requester_id = args[i + 1]
        del args[i:i + 2]
    if not args:
        return None
    return [Path(a) for a in args], requester_id


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    parsed = parse_args(sys.argv[1:])
    if parsed is None:
        print(__doc__)
        sys.exit(2)
    paths, requester_id = parsed
    sys.exit(asyncio.run(run(paths, requester_id)))


if __name__ == "__main__":
    main()
