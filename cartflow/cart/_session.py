"""
Cart session — mutations against an injected cart repository.

Every mutation re-reads the cart and re-aggregates; totals are never patched
incrementally.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from kungfu import Result, Ok, Error

from cartflow.cart._aggregate import aggregate, validate_quantity
from cartflow.cart._types import CartLine, CartTotals
from cartflow.errors import RepositoryFailure, ValidationError
from cartflow.lift import guarded

if TYPE_CHECKING:
    from cartflow.repo import CartRepository

log = structlog.get_logger(__name__)


class CartSession:
    """
    Cart operations for one buyer's cart.

    Example:
        session = CartSession(MemoryCartRepository())
        match await session.set_quantity("p1", 3, available_stock=10):
            case Ok(totals):
                render(totals)
            case Error(e):
                show(e.message)
    """

    def __init__(self, repository: CartRepository) -> None:
        self._repository = repository

    async def lines(self) -> Result[list[CartLine], RepositoryFailure]:
        return await guarded("cart.get_lines", self._repository.get_lines)

    async def totals(self) -> Result[CartTotals, RepositoryFailure]:
        match await self.lines():
            case Ok(lines):
                return Ok(aggregate(lines))
            case Error(failure):
                return Error(failure)

    async def set_quantity(
        self,
        product_id: str,
        quantity: int,
        *,
        available_stock: int | None = None,
    ) -> Result[CartTotals, ValidationError | RepositoryFailure]:
        match validate_quantity(quantity, available_stock):
            case Error(invalid):
                return Error(invalid)
            case Ok(_):
                pass

        written = await guarded(
            "cart.set_quantity",
            lambda: self._repository.set_quantity(product_id, quantity),
        )
        match written:
            case Error(failure):
                return Error(failure)
            case Ok(_):
                log.debug("cart_quantity_set", product_id=product_id, quantity=quantity)
                return await self.totals()

    async def remove(
        self,
        product_id: str,
    ) -> Result[CartTotals, RepositoryFailure]:
        removed = await guarded(
            "cart.remove",
            lambda: self._repository.remove(product_id),
        )
        match removed:
            case Error(failure):
                return Error(failure)
            case Ok(_):
                log.debug("cart_item_removed", product_id=product_id)
                return await self.totals()

    async def clear(self) -> Result[CartTotals, RepositoryFailure]:
        match await guarded("cart.clear", self._repository.clear):
            case Error(failure):
                return Error(failure)
            case Ok(_):
                return Ok(CartTotals())


__all__ = ("CartSession",)
