#!/usr/bin/env python3
"""
Command line interface to generate and decode VIN identifiers.
"""

import argparse
import json
import sys
from typing import List, Optional

from loguru import logger
from redis.exceptions import RedisError

from vin.core.config import load_config, load_settings, setup_logging
from vin.core.errors import VINError
from vin.core.identifier import Id
from vin.core.redis import RedisConnectionManager
from vin.core.vin import VIN


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vin", description="Generate or decode VIN identifiers")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate IDs")
    generate.add_argument("data_type", type=int, help="Data type tag to embed in the IDs")
    generate.add_argument("--count", type=int, default=1, help="Number of IDs to generate")
    generate.add_argument("--timestamp", type=int, help="Explicit timestamp in Unix milliseconds")

    decode = subparsers.add_parser("decode", help="Decode IDs into their fields")
    decode.add_argument("ids", type=int, nargs="+", help="IDs to decode")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        setup_logging(settings.log_level)
        config = load_config(settings)

        if args.command == "decode":
            for raw in args.ids:
                print(json.dumps(Id(id=raw, config=config).to_dict()))
            return 0

        vin = VIN(config=config, connection_manager=RedisConnectionManager(settings.redis_url))
        ids = vin.generate_ids(args.data_type, args.count, timestamp=args.timestamp)
        for id in ids:
            print(id)
        if len(ids) < args.count:
            logger.error(f"Only {len(ids)} of {args.count} IDs could be generated")
            return 1
        return 0
    except VINError as e:
        logger.error(str(e))
        return 2
    except RedisError as e:
        logger.error(f"Redis error: {str(e)}")
        return 3


if __name__ == "__main__":
    """Run the script."""
    sys.exit(main())
