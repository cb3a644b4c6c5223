"""
Tracking — an order's life in SQLite.

Level 3: cartflow.orders.advance
Level 2: cartflow.repo (SQLAlchemy + aiosqlite)
Level 1: kungfu.Result
"""

from kungfu import Ok, Error
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from cartflow import checkout as C
from cartflow import orders as O
from cartflow import summary as Y
from cartflow import tracking as T
from cartflow._types import PaymentTiming
from cartflow.repo import (
    SQLAlchemyOrderRepository,
    SQLAlchemyTrackingEventRepository,
    create_schema,
)
from examples._infra import banner, demo_cart, run, show


async def main() -> None:
    engine = create_async_engine("sqlite+aiosqlite:///cartflow_demo.db")
    await create_schema(engine)
    sessions = async_sessionmaker(engine, expire_on_commit=False)
    orders = SQLAlchemyOrderRepository(sessions)
    tracking = SQLAlchemyTrackingEventRepository(sessions)

    banner("Place")
    request = C.CheckoutRequest("buyer-1", PaymentTiming.NOW, "14 Harbour Rd", "card")
    match await C.place_order(demo_cart(), orders, tracking, request):
        case Ok(p):
            order = next(s.order for s in p.shops if s.shop_id == "furniture-hub")
            print(f"  ✓ {order.id} (furniture-hub, {len(p.shops)} orders placed)")
        case Error(e):
            print(f"  ✗ {e.message}")
            return

    banner("Seller and courier move it along")
    seller, courier = O.Actor.seller("furniture-hub"), O.Actor.courier("rider-7")
    for target, actor in [
        (O.OrderStatus.CONFIRMED, seller),
        (O.OrderStatus.PROCESSING, seller),
        (O.OrderStatus.SHIPPED, courier),
    ]:
        show(await O.advance(orders, tracking, order.id, order.buyer_id, target, actor))

    banner("Buyer tries to cancel")
    show(await O.advance(orders, tracking, order.id, order.buyer_id,
                         O.OrderStatus.CANCELLED, O.Actor.buyer(order.buyer_id)))

    banner("Timeline")
    match await orders.fetch(order.id, order.buyer_id):
        case Ok(current):
            events = await tracking.list_for(order.id)
            for step in T.build_timeline(current.status, events, current.created_at):
                mark = "●" if step.complete else "○"
                when = step.timestamp.isoformat(timespec="seconds") if step.timestamp else "—"
                print(f"  {mark} {step.label:<16} {when}")

            summary = Y.project(current)
            print(f"\n  total {summary.display(summary.computed_total)}"
                  f" ({'consistent' if summary.consistent else 'drift!'})")
        case Error(e):
            print(f"  ✗ {e.message}")

    await engine.dispose()


if __name__ == "__main__":
    run(main)
