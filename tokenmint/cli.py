#!/usr/bin/env python3
"""
tokenmint CLI

Command-line interface for a local token registry:
  tokenmint account create|list    - Manage signing accounts
  tokenmint init <config.yaml>     - Create a registry (mints asset 1)
  tokenmint mint / update          - Issue assets, change descriptors
  tokenmint exempt / set-fee / withdraw / transfer-admin / relinquish-admin
  tokenmint info / owner / uri / is-exempt / events

Usage:
  tokenmint account create alice
  tokenmint init registry.yaml --as alice
  tokenmint mint --as bob --value 10 --uri https://example.com/2.json
  tokenmint mint --as alice --name "Cat" --description "A cat" --image cat.png -a color=black
  tokenmint uri 2 --decode
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULT_DATA_DIR, RegistryConfig
from .contract import TokenRegistry
from .dispatch import CallDispatcher
from .errors import RegistryError
from .identity import Account, AccountStore, Call, sign_call
from .metadata import decode, is_encoded, metadata_from_attributes
from .store import StateStore

logger = logging.getLogger(__name__)


def parse_attribute(attr_str: str) -> Dict[str, str]:
    """
    Parse attribute specification: trait=value

    Returns {"trait_type": trait, "value": value}
    """
    if "=" not in attr_str:
        raise ValueError(f"Invalid attribute format: {attr_str}. Expected trait=value")
    trait, value = attr_str.split("=", 1)
    return {"trait_type": trait, "value": value}


def descriptor_from_args(args) -> Any:
    """Build a raw URI or a metadata dict from descriptor options."""
    if args.uri is not None:
        return args.uri
    if args.metadata:
        with open(args.metadata) as f:
            return json.load(f)
    if args.name is None and args.description is None and args.image is None:
        raise ValueError("Provide --uri, --metadata, or --name/--description/--image")
    metadata = metadata_from_attributes(
        description=args.description or "",
        image=args.image or "",
        name=args.name or "",
        attributes=[parse_attribute(a) for a in args.attr or []],
    )
    return metadata.to_dict()


def _data_dir(args, config: Optional[RegistryConfig] = None) -> Path:
    if args.data_dir:
        return Path(args.data_dir)
    if config is not None:
        return config.data_path
    return Path(DEFAULT_DATA_DIR)


def _accounts(data_dir: Path) -> AccountStore:
    return AccountStore(data_dir / "accounts")


def _account(accounts: AccountStore, label: str) -> Account:
    account = accounts.get(label)
    if account is None:
        raise ValueError(f"Unknown account: {label}")
    return account


def _principal(accounts: AccountStore, value: str) -> str:
    """Resolve an account label to its address; addresses pass through."""
    account = accounts.get(value)
    return account.address if account else value


def _open(data_dir: Path) -> TokenRegistry:
    return StateStore(data_dir / "registry").open()


def _submit(args, operation: str, params: Dict[str, Any], value: int = 0) -> Any:
    """Sign a call as --as and run it against the stored registry."""
    data_dir = _data_dir(args)
    accounts = _accounts(data_dir)
    account = _account(accounts, args.as_account)
    registry = _open(data_dir)
    call = sign_call(Call(operation, params, account.address, value=value), account)
    return CallDispatcher(registry, accounts).submit(call)


def cmd_account(args):
    """Create or list accounts."""
    accounts = _accounts(_data_dir(args))
    if args.account_command == "create":
        account = accounts.create(args.label)
        print(f"Created account {account.label}: {account.address}")
    else:
        for account in accounts.list():
            print(f"{account.label}\t{account.address}")


def cmd_init(args):
    """Initialize a registry from a config file."""
    config = RegistryConfig.from_file(Path(args.config))
    if not args.log_level:
        logging.getLogger().setLevel(config.log_level.upper())
    data_dir = _data_dir(args, config)
    accounts = _accounts(data_dir)
    account = _account(accounts, args.as_account)

    registry = StateStore(data_dir / "registry").initialize(
        initializer=account.address,
        name=config.name,
        symbol=config.symbol,
        fee=config.fee,
        first_descriptor=config.first_descriptor,
        registry_address=config.registry_address,
    )
    print(f"Registry: {registry.name} ({registry.symbol})")
    print(f"Address: {registry.registry_address}")
    print(f"Admin: {registry.admin}")
    print(f"Fee: {registry.fee}")


def cmd_mint(args):
    token_id = _submit(args, "mint", {"descriptor": descriptor_from_args(args)}, value=args.value)
    print(f"Minted asset {token_id}")


def cmd_update(args):
    _submit(args, "update_descriptor", {
        "token_id": args.token_id,
        "descriptor": descriptor_from_args(args),
    })
    print(f"Updated asset {args.token_id}")


def cmd_exempt(args):
    accounts = _accounts(_data_dir(args))
    principals = [_principal(accounts, p) for p in args.principals]
    _submit(args, "toggle_exemptions", {"principals": principals})
    registry = _open(_data_dir(args))
    for principal in principals:
        status = "exempt" if registry.is_exempt(principal) else "not exempt"
        print(f"{principal}: {status}")


def cmd_set_fee(args):
    _submit(args, "update_fee", {"fee": args.fee})
    print(f"Fee set to {args.fee}")


def cmd_withdraw(args):
    amount = _submit(args, "withdraw_all", {})
    print(f"Withdrew {amount}")


def cmd_transfer_admin(args):
    accounts = _accounts(_data_dir(args))
    new_admin = _principal(accounts, args.new_admin)
    _submit(args, "transfer_admin", {"new_admin": new_admin})
    print(f"Admin transferred to {new_admin}")


def cmd_relinquish_admin(args):
    _submit(args, "relinquish_admin", {})
    print("Admin relinquished")


def cmd_info(args):
    registry = _open(_data_dir(args))
    print(f"Name: {registry.name}")
    print(f"Symbol: {registry.symbol}")
    print(f"Address: {registry.registry_address}")
    print(f"Admin: {registry.admin or '(none)'}")
    print(f"Fee: {registry.fee}")
    print(f"Balance: {registry.balance}")
    print(f"Next id: {registry.next_id}")
    print(f"Exempt: {len(registry.exemptions)}")


def cmd_owner(args):
    registry = _open(_data_dir(args))
    print(registry.owner_of(args.token_id))


def cmd_uri(args):
    registry = _open(_data_dir(args))
    uri = registry.uri_of(args.token_id)
    if args.decode and is_encoded(uri):
        print(json.dumps(decode(uri).to_dict(), indent=2))
    else:
        print(uri)


def cmd_is_exempt(args):
    data_dir = _data_dir(args)
    principal = _principal(_accounts(data_dir), args.principal)
    print("true" if _open(data_dir).is_exempt(principal) else "false")


def cmd_events(args):
    registry = _open(_data_dir(args))
    events = registry.events.find_by_type(args.type) if args.type else registry.events.list()
    for event in events:
        args_str = ", ".join(f"{k}={v}" for k, v in event.args.items())
        print(f"#{event.sequence} {event.event_type}({args_str})")


def _add_descriptor_args(parser: argparse.ArgumentParser):
    parser.add_argument("--uri", help="Raw URI descriptor")
    parser.add_argument("--metadata", help="Metadata JSON file")
    parser.add_argument("--name", help="Metadata name")
    parser.add_argument("--description", help="Metadata description")
    parser.add_argument("--image", help="Metadata image")
    parser.add_argument("-a", "--attr", action="append", help="Attribute: trait=value")


def _add_as_arg(parser: argparse.ArgumentParser):
    parser.add_argument("--as", dest="as_account", required=True, help="Account label to sign with")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tokenmint",
        description="tokenmint - Fee-gated asset registry",
    )
    parser.add_argument("--data-dir", help=f"Data directory (default: {DEFAULT_DATA_DIR})")
    parser.add_argument("--log-level", help="Logging level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # account command
    account_parser = subparsers.add_parser("account", help="Manage accounts")
    account_sub = account_parser.add_subparsers(dest="account_command", required=True)
    create_parser = account_sub.add_parser("create", help="Create an account")
    create_parser.add_argument("label", help="Account label")
    account_sub.add_parser("list", help="List accounts")
    account_parser.set_defaults(func=cmd_account)

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize a registry")
    init_parser.add_argument("config", help="Config YAML file")
    _add_as_arg(init_parser)
    init_parser.set_defaults(func=cmd_init)

    # mint command
    mint_parser = subparsers.add_parser("mint", help="Mint an asset")
    _add_as_arg(mint_parser)
    mint_parser.add_argument("--value", type=int, default=0, help="Value attached to the mint")
    _add_descriptor_args(mint_parser)
    mint_parser.set_defaults(func=cmd_mint)

    # update command
    update_parser = subparsers.add_parser("update", help="Update an asset descriptor")
    update_parser.add_argument("token_id", type=int, help="Asset id")
    _add_as_arg(update_parser)
    _add_descriptor_args(update_parser)
    update_parser.set_defaults(func=cmd_update)

    # exempt command
    exempt_parser = subparsers.add_parser("exempt", help="Toggle fee exemption")
    exempt_parser.add_argument("principals", nargs="+", help="Addresses or account labels")
    _add_as_arg(exempt_parser)
    exempt_parser.set_defaults(func=cmd_exempt)

    # set-fee command
    fee_parser = subparsers.add_parser("set-fee", help="Update the mint fee")
    fee_parser.add_argument("fee", type=int, help="New fee")
    _add_as_arg(fee_parser)
    fee_parser.set_defaults(func=cmd_set_fee)

    # withdraw command
    withdraw_parser = subparsers.add_parser("withdraw", help="Withdraw the whole balance")
    _add_as_arg(withdraw_parser)
    withdraw_parser.set_defaults(func=cmd_withdraw)

    # transfer-admin command
    transfer_parser = subparsers.add_parser("transfer-admin", help="Hand over the admin role")
    transfer_parser.add_argument("new_admin", help="Address or account label")
    _add_as_arg(transfer_parser)
    transfer_parser.set_defaults(func=cmd_transfer_admin)

    # relinquish-admin command
    relinquish_parser = subparsers.add_parser("relinquish-admin", help="Remove the admin for good")
    _add_as_arg(relinquish_parser)
    relinquish_parser.set_defaults(func=cmd_relinquish_admin)

    # query commands
    subparsers.add_parser("info", help="Show registry state").set_defaults(func=cmd_info)

    owner_parser = subparsers.add_parser("owner", help="Show the holder of an asset")
    owner_parser.add_argument("token_id", type=int, help="Asset id")
    owner_parser.set_defaults(func=cmd_owner)

    uri_parser = subparsers.add_parser("uri", help="Show the URI of an asset")
    uri_parser.add_argument("token_id", type=int, help="Asset id")
    uri_parser.add_argument("--decode", action="store_true", help="Decode structured metadata")
    uri_parser.set_defaults(func=cmd_uri)

    is_exempt_parser = subparsers.add_parser("is-exempt", help="Check fee exemption")
    is_exempt_parser.add_argument("principal", help="Address or account label")
    is_exempt_parser.set_defaults(func=cmd_is_exempt)

    events_parser = subparsers.add_parser("events", help="List committed notifications")
    events_parser.add_argument("--type", help="Only this notification type")
    events_parser.set_defaults(func=cmd_events)

    return parser


def main(argv: List[str] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = args.log_level or "WARNING"
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        args.func(args)
    except RegistryError as e:
        print(f"error [{e.tag}]: {e.message}", file=sys.stderr)
        return 1
    except (ValueError, TypeError, FileNotFoundError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
