"""Submit fiscal XML files from the command line.

Examples:
    python -m fiscaldoc.ingest invoices/nfe-0001.xml invoices/cte-0042.xml
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from fiscaldoc.config.settings import Settings
from fiscaldoc.database.connection import close_pool, init_pool
from fiscaldoc.factory import build_document_ingestor, build_publisher
from fiscaldoc.ingestion.exceptions import IngestionError
from fiscaldoc.logging.logger import Log
from fiscaldoc.messaging.connection import RabbitMQConnection


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest fiscal XML documents")
    parser.add_argument("files", nargs="+", type=Path, help="XML files to submit")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Ingest each file in turn. Returns 1 if any file failed."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level, settings.app_env)
    init_pool(settings)
    publisher = build_publisher(settings, RabbitMQConnection(settings))

    failures = 0
    try:
        for path in args.files:
            ingestor = build_document_ingestor(settings, publisher)
            try:
                with path.open("rb") as stream:
                    result = ingestor.ingest(stream, path.name)
            except (OSError, IngestionError) as exc:
                Log.error(f"{path}: {exc}")
                failures += 1
                continue
            print(f"{path}\t{result.document_id}\t{result.message}")
    finally:
        publisher.close()
        close_pool()
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
