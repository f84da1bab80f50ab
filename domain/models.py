from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:
    from domain.gateways import WalletConnection


@dataclass
class Session:
    """
    The single wallet session of a running gateway.

    Owned by the `SessionManager` and handed explicitly to every component
    that needs the caller's identity or the wallet connection. Only the
    session manager writes to it.
    """

    account_id: Optional[str] = None
    connection: Optional["WalletConnection"] = None
    signed_in: bool = False

    def clear(self) -> None:
        self.account_id = None
        self.signed_in = False


@dataclass
class AccountBalance:
    """Raw available balance in yoctoNEAR and its display value after the reserve."""

    raw: int
    available: Decimal


class MethodKind(str, Enum):
    VIEW = "view"
    CHANGE = "change"


@dataclass(frozen=True)
class ContractMethod:
    """
    Static descriptor of one remote contract method.

    `arg_keys` lists the exact keys of the JSON `args` object the method
    accepts. `payable` methods carry a transaction-level deposit instead of
    (or in addition to) their arguments.
    """

    name: str
    kind: MethodKind
    arg_keys: Tuple[str, ...] = ()
    payable: bool = False


class CapabilityProfile(str, Enum):
    SOLO = "solo"
    MATCHED = "matched"


class MatchStatus(str, Enum):
    UNSET = "unset"
    OPPONENT_SET = "opponent-set"
    PRICE_SET = "price-set"
    ACTIVE = "active"
    SETTLED = "settled"
    CANCELLED = "cancelled"


@dataclass
class Player:
    """One entry of the contract's player list."""

    account_id: str
    price: int = 0
    opponent: Optional[str] = None
    is_play: bool = False


@dataclass
class MatchSnapshot:
    """A match as observed from fresh contract reads."""

    account_id: str
    opponent_id: Optional[str]
    price: int
    status: MatchStatus


@dataclass(frozen=True)
class NetworkConfig:
    network_id: str
    node_url: str
    contract_name: str
    wallet_url: Optional[str] = None
    explorer_url: Optional[str] = None


@dataclass
class AuthData:
    """
    Wallet authorization persisted between page loads.

    `all_keys` are the public keys the wallet reported for the account when
    it approved the sign-in.
    """

    account_id: str
    all_keys: List[str] = field(default_factory=list)
