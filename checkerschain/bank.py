"""The bank interface the checkers module relies on, and an in-memory bank."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from checkerschain.types import Coin


@runtime_checkable
class AccountKeeper(Protocol):
    """Account lookups the module may need."""

    def get_account(self, ctx: Any, address: bytes) -> Any: ...


@runtime_checkable
class BankKeeper(Protocol):
    """Coin transfers between accounts and the module's escrow."""

    def spendable_coins(self, ctx: Any, address: bytes) -> list[Coin]: ...

    def send_coins_from_module_to_account(
        self, ctx: Any, module: str, recipient: bytes, coins: Iterable[Coin]
    ) -> None: ...

    def send_coins_from_account_to_module(
        self, ctx: Any, sender: bytes, module: str, coins: Iterable[Coin]
    ) -> None: ...


class InsufficientFundsError(ValueError):
    """Raised when a holder does not have enough coins for a transfer."""


def _checked(coins: Iterable[Coin]) -> list[Coin]:
    result = list(coins)
    for coin in result:
        if coin.amount < 0:
            raise ValueError(f"negative coin amount: {coin.amount}{coin.denom}")
    return [coin for coin in result if coin.amount]


def _transfer(source: dict[str, int], target: dict[str, int], coins: list[Coin]) -> None:
    for coin in coins:
        have = source.get(coin.denom, 0)
        if have < coin.amount:
            raise InsufficientFundsError(
                f"spendable balance {have}{coin.denom} is smaller than "
                f"{coin.amount}{coin.denom}: insufficient funds"
            )
    for coin in coins:
        source[coin.denom] -= coin.amount
        target[coin.denom] += coin.amount


def _snapshot(holdings: dict[str, int]) -> dict[str, int]:
    return {denom: amount for denom, amount in sorted(holdings.items()) if amount}


class InMemoryBank:
    """A bank that keeps account and module balances in memory."""

    def __init__(self) -> None:
        self._accounts: dict[bytes, defaultdict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._modules: dict[str, defaultdict[str, int]] = defaultdict(lambda: defaultdict(int))

    def balance(self, address: bytes) -> dict[str, int]:
        """Return the non-zero holdings of an account, by denomination."""
        return _snapshot(self._accounts.get(address, {}))

    def module_balance(self, module: str) -> dict[str, int]:
        """Return the non-zero holdings of a module account, by denomination."""
        return _snapshot(self._modules.get(module, {}))

    def mint(self, address: bytes, coins: Iterable[Coin]) -> None:
        """Create coins in an account."""
        account = self._accounts[address]
        for coin in _checked(coins):
            account[coin.denom] += coin.amount

    def spendable_coins(self, ctx: Any, address: bytes) -> list[Coin]:
        return [Coin(denom, amount) for denom, amount in self.balance(address).items()]

    def send_coins_from_account_to_module(
        self, ctx: Any, sender: bytes, module: str, coins: Iterable[Coin]
    ) -> None:
        _transfer(self._accounts[sender], self._modules[module], _checked(coins))

    def send_coins_from_module_to_account(
        self, ctx: Any, module: str, recipient: bytes, coins: Iterable[Coin]
    ) -> None:
        _transfer(self._modules[module], self._accounts[recipient], _checked(coins))