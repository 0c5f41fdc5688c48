# -*- coding: utf-8 -*-
"""
tokenbound/cli/main.py
CLI для tokenbound-core.

Команды:
    demo            — сценарий на in-memory хосте: создание аккаунта, multicall,
                      вложенный аккаунт, lock
    settings        — печать текущих настроек (JSON)
    interface-id    — идентификатор интерфейса аккаунта (hex)

Детерминированные JSON‑выводы для машинной обработки; exit code 1 при отказе аккаунта.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import typer

from tokenbound.account import Account
from tokenbound.account.codec import decode_responses, encode_calls
from tokenbound.errors import AccountError
from tokenbound.host.memory import AssetContract, InMemoryHost
from tokenbound.registry import AccountRegistry
from tokenbound.settings import Settings, get_settings
from tokenbound.telemetry import metrics
from tokenbound.telemetry.logging import get_logger
from tokenbound.types import TBA_INTERFACE_ID, Call, split_u256
from tokenbound.utils.time import FrozenClock, to_datetime

log = get_logger("tokenbound.cli")

ASSET_ADDRESS = 0x0A55E7
IMPLEMENTATION = 0x1A7E
ALICE = 0xA11CE
BOB = 0xB0B


# ============================ Утилиты ============================

def _emit(obj: Dict[str, Any]) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, sort_keys=True))


def _status(host: InMemoryHost, account: Account) -> Dict[str, Any]:
    locked, remaining = account.is_locked()
    return {
        "time": to_datetime(host.block_timestamp()).isoformat(),
        "locked": locked,
        "remaining": remaining,
    }


# ============================ Сценарий ============================

def run_demo(settings: Settings, lock_duration: int) -> List[Dict[str, Any]]:
    clock = FrozenClock()
    host = InMemoryHost(clock)
    asset = host.deploy(ASSET_ADDRESS, AssetContract())
    asset.mint(ALICE, 1)

    registry = AccountRegistry(host, IMPLEMENTATION, settings=settings)
    account = registry.create_account(ASSET_ADDRESS, 1)
    asset.mint(account.address, 2)

    steps: List[Dict[str, Any]] = [{"step": "created", "account": hex(account.address), "owner": hex(account.owner())}]

    low, high = split_u256(2)
    with host.invoke(ALICE):
        responses = account.execute([
            Call(to=ASSET_ADDRESS, selector="transfer_from", calldata=(account.address, BOB, low, high)),
            Call(to=ASSET_ADDRESS, selector="owner_of", calldata=(low, high)),
        ])
    steps.append({"step": "executed", "responses": responses, "token_2_owner": hex(asset.owner_of(2))})

    # аккаунт, которым владеет другой аккаунт
    asset.mint(account.address, 3)
    child = registry.create_account(ASSET_ADDRESS, 3)
    inner = [Call(to=ASSET_ADDRESS, selector="owner_of", calldata=split_u256(3))]
    with host.invoke(ALICE):
        (outer,) = account.execute([Call(to=child.address, selector="execute", calldata=encode_calls(inner))])
    steps.append({
        "step": "nested_executed",
        "child": hex(child.address),
        "child_owner": hex(child.owner()),
        "responses": decode_responses(outer),
    })

    with host.invoke(ALICE):
        account.lock(lock_duration)
    steps.append({"step": "locked", **_status(host, account)})

    clock.advance(lock_duration // 2)
    steps.append({"step": "halfway", **_status(host, account)})

    try:
        with host.invoke(ALICE):
            account.execute([])
    except AccountError as e:
        steps.append({"step": "execute_while_locked", "error": e.code})

    clock.advance(lock_duration - lock_duration // 2)
    steps.append({"step": "expired", **_status(host, account)})

    asset.transfer(1, BOB)
    try:
        with host.invoke(ALICE):
            account.execute([])
    except AccountError as e:
        steps.append({"step": "old_owner_rejected", "error": e.code})
    with host.invoke(BOB):
        account.execute([])
    steps.append({"step": "new_owner_executed", "owner": hex(account.owner())})
    return steps


# ============================ Typer CLI ============================

app = typer.Typer(add_completion=False, help="Token-bound account tooling")


@app.callback()
def _global(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level"),
) -> None:
    settings = get_settings()
    settings.configure_logging(level=log_level)
    metrics.configure(enabled=settings.metrics.enabled)


@app.command()
def demo(
    lock_duration: int = typer.Option(100, "--lock-duration", min=0, help="Lock length in seconds"),
) -> None:
    """Run the in-memory scenario and print one JSON line per step."""
    try:
        for step in run_demo(get_settings(), lock_duration):
            _emit(step)
    except AccountError as e:
        log.error("demo aborted: %s", e.code)
        _emit({"error": e.to_dict()})
        raise typer.Exit(code=1)


@app.command("settings")
def show_settings() -> None:
    """Print effective settings."""
    typer.echo(get_settings().to_json())


@app.command("interface-id")
def interface_id() -> None:
    """Print the account interface id."""
    _emit({"interface_id": hex(TBA_INTERFACE_ID)})


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
