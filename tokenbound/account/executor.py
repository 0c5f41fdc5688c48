# tokenbound/account/executor.py
# -*- coding: utf-8 -*-
"""
Атомарный multicall от имени аккаунта.

Вызовы исполняются строго по порядку; первый упавший вызов откатывает всю
пачку (через host.atomic()) и поднимает MulticallFailed с индексом.
Результаты возвращаются в порядке входных вызовов.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from tokenbound.errors import CallFailed, MulticallFailed
from tokenbound.host.base import ExecutionHost
from tokenbound.telemetry.metrics import observe_multicall
from tokenbound.types import Call, ReturnData

logger = logging.getLogger("tokenbound.account.executor")


class CallExecutor:
    def __init__(self, host: ExecutionHost, sender: int, *, metrics_enabled: bool = True) -> None:
        self.host = host
        self.sender = sender
        self.metrics_enabled = metrics_enabled

    def execute_batch(self, calls: Sequence[Call]) -> List[ReturnData]:
        responses: List[ReturnData] = []
        with self.host.atomic():
            for index, call in enumerate(calls):
                try:
                    responses.append(
                        self.host.call_contract(self.sender, call.to, call.selector, call.calldata)
                    )
                except CallFailed as e:
                    logger.debug("call #%d to %s::%s failed", index, hex(call.to), call.selector)
                    raise MulticallFailed(index, e.reason, target=hex(call.to), selector=call.selector) from e
        observe_multicall(len(calls), enabled=self.metrics_enabled)
        return responses
