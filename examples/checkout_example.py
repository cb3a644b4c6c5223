"""
Checkout — cart totals, deposit vs full payment, placement.

Level 3: cartflow.checkout (saga under the hood)
Level 2: cartflow.cart
Level 1: kungfu.Result
"""

from kungfu import Ok, Error

from cartflow import cart as K
from cartflow import checkout as C
from cartflow import configure_logging
from cartflow._types import PaymentTiming, to_display
from cartflow.repo import MemoryOrderRepository, MemoryTrackingEventRepository
from examples._infra import banner, demo_cart, run, show


async def main() -> None:
    configure_logging("INFO")
    cart = demo_cart(K.DeliveryZone.UPTOWN)
    lines = await cart.get_lines()

    banner("Cart")
    totals = K.aggregate(lines)
    for group in K.group_by_shop(lines):
        print(f"  {group.shop_id}: {to_display(group.subtotal)}")
    print(f"  standard  {to_display(totals.standard_subtotal)}")
    print(f"  on order  {to_display(totals.on_order_subtotal)}")
    print(f"  delivery  {to_display(totals.delivery_fee_total)}")
    print(f"  total     {to_display(totals.grand_total)}")
    print(f"  (runner {to_display(totals.runner_fee_total)}, "
          f"transport {to_display(totals.transport_fee_total)} due on delivery)")

    banner("Payment options")
    for timing in PaymentTiming:
        match C.resolve(lines, timing):
            case Ok(plan):
                print(f"  {timing}: now {to_display(plan.due_now)}, later {to_display(plan.due_later)}")
            case Error(e):
                print(f"  {timing}: {e.message}")

    banner("Place order (pay deposit)")
    orders = MemoryOrderRepository()
    tracking = MemoryTrackingEventRepository()
    request = C.CheckoutRequest("buyer-1", PaymentTiming.LATER, "14 Harbour Rd", "mobile-money")
    placed = await C.place_order(cart, orders, tracking, request)
    match placed:
        case Ok(p):
            for shop in p.shops:
                print(f"  ✓ {shop.order.id} ({shop.shop_id}) charged {to_display(shop.plan.due_now)}")
            print(f"  total charged {to_display(p.plan.due_now)}")
            print(f"  cart now holds {len(await cart.get_lines())} lines")
        case Error(_):
            show(placed)

    banner("Place again (cart is empty)")
    show(await C.place_order(cart, orders, tracking, request))


if __name__ == "__main__":
    run(main)
