"""Drain the image queue without a reviewer and write a provisional report.

Every image is classified once; all rows stay ``pending`` so the report can be
loaded later as a worklist for manual validation.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from lightcheck.api.v2.dependencies import build_review_context  # noqa: E402
from lightcheck.core.config import get_settings  # noqa: E402
from lightcheck.core.logging import configure_logging  # noqa: E402
from lightcheck.domain.errors import LightcheckError  # noqa: E402

logger = logging.getLogger("prelabel_queue")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--queue-url", default=None, help="Queue endpoint; defaults to LIGHTCHECK_QUEUE_URL")
    parser.add_argument("--output", type=Path, default=None, help="Report path (.xlsx)")
    parser.add_argument("--max-batches", type=int, default=0, help="Stop after N batches (0 = all)")
    parser.add_argument("--init", action="store_true", help="Initialize the queue before fetching")
    return parser.parse_args(argv)


async def _drain(args: argparse.Namespace) -> dict[str, Any]:
    settings = get_settings()
    context = build_review_context(settings)
    service = context.service
    if args.queue_url:
        service.configure(args.queue_url)

    batches = 0
    try:
        if args.init:
            await service.init_queue()
        while not args.max_batches or batches < args.max_batches:
            batch = await service.fetch_next_batch()
            if batch is None:
                break
            batches += 1
            logger.info("%s", batch.caption)
            await context.analysis.join()
    finally:
        await context.analysis.close()

    history = context.session.history
    output = args.output or Path(settings.report_filename)
    written = service.export_report_to(output.expanduser().resolve())
    return {
        "batches": batches,
        "images": len(history),
        "analyzed": sum(1 for record in history if record.judgment is not None),
        "failed": sum(1 for record in history if record.error is not None),
        "lightsOn": sum(1 for record in history if record.provisional_status is True),
        "report": str(written) if written else None,
    }


def main(argv: list[str] | None = None) -> int:
    configure_logging(logging.INFO)
    args = _parse_args(argv)
    try:
        summary = asyncio.run(_drain(args))
    except LightcheckError as exc:
        print(f"Queue run failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
