from __future__ import annotations

from decimal import Decimal, localcontext

from domain.amounts import floor_to_cents, yocto_to_near
from domain.errors import NotSignedInError, SessionNotInitializedError
from domain.models import AccountBalance, Session


# Kept back from the available balance so the UI never offers an amount
# that would leave nothing for gas.
BALANCE_RESERVE = Decimal("0.05")


def possibly_available(raw: int) -> Decimal:
    """
    Display amount that can be spent out of `raw` yoctoNEAR.

    floor((raw / 10**24 - 0.05) * 100) / 100. The result is not clamped:
    a balance below the reserve gives a negative value.
    """

    with localcontext() as ctx:
        ctx.prec = 80
        return floor_to_cents(yocto_to_near(raw) - BALANCE_RESERVE)


def format_balance(value: Decimal) -> str:
    return f"{value:.2f}"


async def get_account_balance(session: Session) -> AccountBalance:
    if session.connection is None:
        raise SessionNotInitializedError()
    if not session.signed_in:
        raise NotSignedInError("get_account_balance")

    balance = await session.connection.account().get_account_balance()
    raw = int(balance["available"])
    return AccountBalance(raw=raw, available=possibly_available(raw))


async def get_possibly_available_balance(session: Session) -> str:
    """
    The most the signed-in account can offer to spend, e.g. "4.95".

    Callers must treat zero or negative values as insufficient funds.
    """

    balance = await get_account_balance(session)
    return format_balance(balance.available)
