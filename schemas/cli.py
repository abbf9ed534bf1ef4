"""
Command line entry point.

    hiring-schemas list [--entity User]
    hiring-schemas validate UserCreateInput payload.json
    echo '{"email": "jane@acme.io"}' | hiring-schemas validate UserWhereUniqueInput

``validate`` prints the result as JSON on stdout and exits with status 1
when the payload is invalid. Logs go to stderr, configured from settings.
"""

import argparse
import json
import sys
from datetime import date, datetime
from enum import Enum as PyEnum
from typing import Any, Optional, Sequence

from core.config import settings
from core.logging import get_logger, setup_logging
from schemas.catalog import SchemaVariant, get_registry
from schemas.validation import validate

logger = get_logger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, PyEnum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _list(args: argparse.Namespace) -> int:
    registry = get_registry()
    if args.entity:
        if args.entity not in registry.entities:
            print(f"Unknown entity: {args.entity}", file=sys.stderr)
            return 2
        names = [
            name
            for name in (variant.schema_name(args.entity) for variant in SchemaVariant)
            if name in registry
        ]
    else:
        names = registry.names()
    for name in names:
        print(name)
    return 0


def _validate(args: argparse.Namespace) -> int:
    source = sys.stdin if args.path == "-" else open(args.path, encoding="utf-8")
    try:
        payload = json.load(source)
    except json.JSONDecodeError as e:
        print(f"Invalid JSON: {e}", file=sys.stderr)
        return 2
    finally:
        if source is not sys.stdin:
            source.close()

    try:
        result = validate(args.schema, payload)
    except KeyError as e:
        print(str(e).strip("'\""), file=sys.stderr)
        return 2

    output = {
        "schema": result.schema,
        "ok": result.ok,
        "data": result.data,
        "issues": [issue.to_dict() for issue in result.issues],
    }
    print(json.dumps(output, default=_json_default, indent=2))
    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hiring-schemas",
        description="Inspect and apply the hiring platform's input schemas.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    list_parser = commands.add_parser("list", help="List registered schema names")
    list_parser.add_argument("--entity", help="Only the schemas of one entity")
    list_parser.set_defaults(handler=_list)

    validate_parser = commands.add_parser("validate", help="Validate a JSON payload")
    validate_parser.add_argument("schema", help="Schema name, e.g. UserCreateInput")
    validate_parser.add_argument(
        "path", nargs="?", default="-", help="JSON file to read (default: stdin)"
    )
    validate_parser.set_defaults(handler=_validate)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(
        log_level="DEBUG" if settings.debug else settings.log_level,
        json_logs=settings.json_logs,
    )
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")

    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
