import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone

from .history import build_history_record
from .pipeline import ListingExtractor
from .registry import dispose_engine


_RESERVED_LOG_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line, including any `extra=` fields."""

    def format(self, record):
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_LOG_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level=None, log_json=False):
    handler = logging.StreamHandler(sys.stderr)
    if log_json:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] [%(levelname)s] %(name)s: %(message)s")
        )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel((level or "WARNING").upper())
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def _run(args):
    extractor = ListingExtractor()
    try:
        if args.combined == "all":
            return await extractor.combined_all(args.url), True
        if args.combined == "properties-owners":
            return await extractor.combined_properties_owners(args.url), True
        result = await extractor.extract(args.url)
        output = result.to_dict()
        if args.user_id:
            output = {
                "result": output,
                "history": build_history_record(result, args.url, args.user_id),
            }
        return output, result.success
    finally:
        await extractor.aclose()
        dispose_engine()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Extract listing facts from Property Finder and Bayut URLs",
    )
    parser.add_argument(
        "--url",
        required=True,
        help="Listing URL to extract",
    )
    parser.add_argument(
        "--combined",
        choices=["all", "properties-owners"],
        default=None,
        help="Run the combined fan-out instead of a single extraction",
    )
    parser.add_argument(
        "--user-id",
        default=None,
        help="Also print the flattened history record for this user",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, etc.)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log lines as JSON objects on stderr",
    )
    args = parser.parse_args(argv)
    configure_logging(args.log_level or ("INFO" if args.log_json else None), args.log_json)

    output, ok = asyncio.run(_run(args))
    print(json.dumps(output, ensure_ascii=False, indent=2, default=str))
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
