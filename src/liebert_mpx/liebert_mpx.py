"""Command line interface for liebert_mpx"""

import argparse
import json
import logging
import os
from typing import Any, List, Optional

from dotenv import load_dotenv

from .models import BranchCommand, MPXError, PDUCommand, ReceptacleCommand
from .mpx_client import MPXClient

logger = logging.getLogger(__name__)


def parse_address(text: str) -> List[int]:
    """Parse ``P``, ``P.B`` or ``P.B.R`` into a list of numbers"""
    parts = text.split(".")
    if not 1 <= len(parts) <= 3:
        raise argparse.ArgumentTypeError(f"invalid address: {text}")
    try:
        return [int(part) for part in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid address: {text}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="liebert-mpx", description="Liebert MPX PDU web interface client"
    )
    ap.add_argument("--host", help="PDU host (default: $MPX_HOST)")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("receptacles", help="list receptacles and their state")
    sub.add_parser("events", help="list active events/alarms")

    p = sub.add_parser("pdu", help="show PDU (PEM) details")
    p.add_argument("pdu", type=int)

    p = sub.add_parser("branch", help="show branch module details")
    p.add_argument("pdu", type=int)
    p.add_argument("branch", type=int)

    p = sub.add_parser("receptacle", help="show receptacle details")
    p.add_argument("pdu", type=int)
    p.add_argument("branch", type=int)
    p.add_argument("receptacle", type=int)

    p = sub.add_parser("pdu-command", help="send a command to a PDU")
    p.add_argument("pdu", type=int)
    p.add_argument("action", choices=[c.value for c in PDUCommand])

    p = sub.add_parser("branch-command", help="send a command to a branch module")
    p.add_argument("pdu", type=int)
    p.add_argument("branch", type=int)
    p.add_argument("action", choices=[c.value for c in BranchCommand])

    p = sub.add_parser("receptacle-command", help="send a command to a receptacle")
    p.add_argument("pdu", type=int)
    p.add_argument("branch", type=int)
    p.add_argument("receptacle", type=int)
    p.add_argument("action", choices=[c.value for c in ReceptacleCommand])

    p = sub.add_parser("set-label", help="change the user label of a PDU, branch or receptacle")
    p.add_argument("address", type=parse_address, help="P, P.B or P.B.R")
    p.add_argument("label")

    return ap


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def run(client: MPXClient, args: argparse.Namespace) -> None:
    """Execute one parsed command against the PDU"""
    if args.command == "receptacles":
        _print_json([entry.as_dict() for entry in client.get_receptacles()])
    elif args.command == "events":
        _print_json([event.as_dict() for event in client.get_events()])
    elif args.command == "pdu":
        _print_json(client.get_info_pdu(args.pdu).as_dict())
    elif args.command == "branch":
        _print_json(client.get_info_branch(args.pdu, args.branch).as_dict())
    elif args.command == "receptacle":
        info = client.get_info_receptacle(args.pdu, args.branch, args.receptacle)
        _print_json(info.as_dict())
    elif args.command == "pdu-command":
        client.pdu_command(args.pdu, PDUCommand(args.action))
    elif args.command == "branch-command":
        client.branch_command(args.pdu, args.branch, BranchCommand(args.action))
    elif args.command == "receptacle-command":
        client.receptacle_command(
            args.pdu, args.branch, args.receptacle, ReceptacleCommand(args.action)
        )
    elif args.command == "set-label":
        address = args.address
        if len(address) == 1:
            client.update_pdu_settings(*address, label=args.label)
        elif len(address) == 2:
            client.update_branch_settings(*address, label=args.label)
        else:
            client.update_receptacle_settings(*address, label=args.label)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for liebert-mpx"""
    # Load environment variables from .env file
    load_dotenv()

    # Configure logging
    level = os.getenv("MPX_LOG_LEVEL", "INFO").upper()
    valid_level = isinstance(logging.getLevelName(level), int)
    logging.basicConfig(
        level=level if valid_level else logging.INFO,
        format="%(asctime)s [%(levelname)s] (%(funcName)s): %(message)s",
    )
    if not valid_level:
        logger.warning("Unknown MPX_LOG_LEVEL %r, using INFO", level)

    args = build_parser().parse_args(argv)

    try:
        with MPXClient(host=args.host) as client:
            run(client, args)
    except MPXError as e:
        logger.error("%s: %s", args.command, e)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
