from tokenbound.host.base import Contract, ExecutionHost
from tokenbound.host.memory import AssetContract, ContractRevert, EmittedEvent, InMemoryHost

__all__ = [
    "AssetContract",
    "Contract",
    "ContractRevert",
    "EmittedEvent",
    "ExecutionHost",
    "InMemoryHost",
]
