"""
Structured casting: validate JSON input into a pydantic model as the first stage.

Run with: python examples/cast.py
"""

import asyncio

from pydantic import BaseModel

from stepwise import CastError, as_step, cast, with_


class Order(BaseModel):
    sku: str
    quantity: int
    unit_price: float


total = as_step(lambda order: order.quantity * order.unit_price)
receipt = as_step(lambda amount: f"Total due: {amount:.2f}")

pipeline = cast(Order).then(total).then(receipt)


async def main() -> None:
    print(await with_('{"sku": "A-1", "quantity": "3", "unit_price": 2.5}', pipeline))

    try:
        await with_('{"sku": "A-1"}', pipeline)
    except CastError as e:
        print(f"Rejected: {e}")


if __name__ == "__main__":
    asyncio.run(main())
