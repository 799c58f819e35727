"""
Host Platform

In-process stand-in for the execution platform the vault runs on.

Guarantees provided to contracts:
- Calls are strictly serialized; a contract sees one consistent state for
  the whole call.
- Every transaction is atomic: if anything raises, contract storage,
  native balances, deployments and the event log are restored to their
  pre-transaction values before the exception propagates.
- `ctx.origin` is the account that signed the outermost transaction, even
  when the call reaches a contract through intermediaries.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import rlp
from pydantic import BaseModel

from chain.clock import Clock, RealClock
from chain.context import CallContext
from chain.contract import Contract
from chain.errors import ChainError, ContractNotFoundError, InsufficientFundsError
from chain.events import Event
from core.crypto.hashing import address_bytes, keccak256, normalize_address

logger = logging.getLogger(__name__)


def compute_create_address(sender: str, nonce: int) -> str:
    """Address of a contract created by `sender` with CREATE at `nonce`."""
    encoded = rlp.encode([address_bytes(sender), nonce])
    return normalize_address(keccak256(encoded)[12:])


@dataclass
class ChainSnapshot:
    """Everything a failed transaction must put back."""
    contracts: dict[str, Contract]
    states: dict[str, BaseModel]
    balances: dict[str, int]
    events: list[Event]


class Chain:
    """
    Accounts, contracts, native balances and the event log.

    Usage:
        chain = Chain(clock=FrozenClock())
        alice = chain.create_account("alice", balance=10**18)
        vault = chain.deploy(alice, TokenVault, ZERO_HASH, False, 0)
        chain.transact(alice, vault.address, "set_paused", True)
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self.clock: Clock = clock or RealClock()
        self._contracts: dict[str, Contract] = {}
        self._balances: dict[str, int] = {}
        self._nonces: dict[str, int] = {}
        self._events: list[Event] = []

    # ------------------------------------------------------------------
    # Accounts and lookups
    # ------------------------------------------------------------------

    @property
    def timestamp(self) -> int:
        return self.clock.now()

    def create_account(self, label: str, balance: int = 0) -> str:
        """Deterministic externally-owned account derived from `label`."""
        address = normalize_address(keccak256(label.encode("utf-8"))[12:])
        self._balances[address] = balance
        return address

    def balance_of(self, address: str) -> int:
        return self._balances.get(normalize_address(address), 0)

    def set_balance(self, address: str, amount: int) -> None:
        self._balances[normalize_address(address)] = amount

    def nonce_of(self, address: str) -> int:
        return self._nonces.get(normalize_address(address), 0)

    def get_contract(self, address: str) -> Optional[Contract]:
        return self._contracts.get(normalize_address(address))

    def contract(self, address: str) -> Contract:
        """
        Contract at `address`.

        Raises:
            ContractNotFoundError: If nothing is deployed there
        """
        found = self.get_contract(address)
        if found is None:
            raise ContractNotFoundError(normalize_address(address))
        return found

    def is_contract(self, address: str) -> bool:
        return self.get_contract(address) is not None

    def get_code(self, address: str) -> bytes:
        found = self.get_contract(address)
        return found.code if found is not None else b""

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    def emit(self, address: str, name: str, **args: Any) -> None:
        self._events.append(Event(address=address, name=name, args=args))

    def events_named(self, name: str, address: Optional[str] = None) -> list[Event]:
        wanted = normalize_address(address) if address else None
        return [
            e for e in self._events
            if e.name == name and (wanted is None or e.address == wanted)
        ]

    # ------------------------------------------------------------------
    # Atomicity
    # ------------------------------------------------------------------

    def snapshot(self) -> ChainSnapshot:
        return ChainSnapshot(
            contracts=dict(self._contracts),
            states={a: c.state.model_copy(deep=True) for a, c in self._contracts.items()},
            balances=dict(self._balances),
            events=list(self._events),
        )

    def restore(self, snap: ChainSnapshot) -> None:
        self._contracts = dict(snap.contracts)
        for address, state in snap.states.items():
            self._contracts[address].state = state
        self._balances = dict(snap.balances)
        self._events = list(snap.events)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        Run a block all-or-nothing. Nests: an inner failure that is caught
        rolls back only the inner block.
        """
        snap = self.snapshot()
        try:
            yield
        except BaseException:
            self.restore(snap)
            raise

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def _bump_nonce(self, sender: str) -> int:
        nonce = self._nonces.get(sender, 0)
        self._nonces[sender] = nonce + 1
        return nonce

    def move_value(self, sender: str, to: str, amount: int) -> None:
        """
        Move native value between balances without invoking any code.

        Raises:
            InsufficientFundsError: If sender's balance is below amount
        """
        if amount < 0:
            raise ChainError(f"Negative value: {amount}")
        sender = normalize_address(sender)
        to = normalize_address(to)
        available = self._balances.get(sender, 0)
        if available < amount:
            raise InsufficientFundsError(
                f"{sender} has {available}, needs {amount}",
                details={"account": sender, "balance": available, "required": amount},
            )
        self._balances[sender] = available - amount
        self._balances[to] = self._balances.get(to, 0) + amount

    def pay(self, ctx: CallContext, payer: str, to: str, amount: int) -> None:
        """
        Value transfer made by `payer` during a transaction.

        A contract recipient must implement `receive(ctx)`.
        """
        self.move_value(payer, to, amount)
        recipient = self.get_contract(to)
        if recipient is not None:
            receive = getattr(recipient, "receive", None)
            if receive is None:
                raise ChainError(f"{recipient.address} cannot receive value")
            receive(ctx.forward(normalize_address(payer), value=amount))

    def transact(
        self,
        sender: str,
        address: str,
        method: str,
        *args: Any,
        value: int = 0,
        **kwargs: Any,
    ) -> Any:
        """
        Call `method` on the contract at `address` as a top-level transaction.

        Raises whatever the contract raises, after rolling back.
        """
        sender = normalize_address(sender)
        target = self.contract(address)
        fn = getattr(target, method, None)
        if fn is None or method.startswith("_"):
            raise ChainError(f"{target.__class__.__name__} has no method {method!r}")

        self._bump_nonce(sender)
        with self.atomic():
            if value:
                self.move_value(sender, target.address, value)
            ctx = CallContext(
                sender=sender, origin=sender, timestamp=self.timestamp, value=value,
            )
            return fn(ctx, *args, **kwargs)

    def send_value(self, sender: str, to: str, amount: int) -> None:
        """Plain value transfer transaction."""
        sender = normalize_address(sender)
        self._bump_nonce(sender)
        with self.atomic():
            ctx = CallContext(sender=sender, origin=sender, timestamp=self.timestamp)
            self.pay(ctx, sender, to, amount)

    def deploy(self, sender: str, contract_cls: type[Contract], *args: Any) -> Contract:
        """Deploy with CREATE addressing: keccak256(rlp([sender, nonce]))[12:]."""
        sender = normalize_address(sender)
        address = compute_create_address(sender, self._bump_nonce(sender))
        with self.atomic():
            ctx = CallContext(sender=sender, origin=sender, timestamp=self.timestamp)
            return self.create(ctx, address, contract_cls, *args)

    def create(
        self,
        ctx: CallContext,
        address: str,
        contract_cls: type[Contract],
        *args: Any,
    ) -> Contract:
        """
        Construct a contract at a precomputed address.

        Raises:
            ChainError: If the address is already occupied
        """
        address = normalize_address(address)
        if address in self._contracts:
            raise ChainError(f"Address already in use: {address}", details={"address": address})
        instance = contract_cls(self, address, ctx, *args)
        self._contracts[address] = instance
        logger.info(f"Deployed {contract_cls.__name__} at {address}")
        return instance


__all__ = [
    "Chain",
    "ChainSnapshot",
    "compute_create_address",
]
