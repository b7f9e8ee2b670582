from pydantic import BaseModel

TAX_RATE = 0.18  # GST
SHIPPING_FEE = 99.0
FREE_SHIPPING_THRESHOLD = 999.0  # strictly above this ships free
COD_CHARGE = 50.0
COD_MINIMUM = 500.0


class OrderTotals(BaseModel):
    subtotal: float
    tax_amount: float
    shipping_amount: float
    cod_charge: float
    discount_amount: float
    total_amount: float


def shipping_for(subtotal: float) -> float:
    return 0.0 if subtotal > FREE_SHIPPING_THRESHOLD else SHIPPING_FEE


def calculate_totals(
    subtotal: float,
    payment_method: str,
    discount_amount: float = 0.0,
) -> OrderTotals:
    """total = subtotal + tax + shipping + cod charge - discount"""
    subtotal = round(subtotal, 2)
    tax_amount = round(subtotal * TAX_RATE, 2)
    shipping_amount = shipping_for(subtotal)
    cod_charge = COD_CHARGE if payment_method == "cod" else 0.0
    discount_amount = round(discount_amount, 2)
    if discount_amount < 0 or discount_amount > subtotal + shipping_amount:
        raise ValueError(
            f"discount {discount_amount} is outside 0..{subtotal + shipping_amount} for this order"
        )

    total = subtotal + tax_amount + shipping_amount + cod_charge - discount_amount
    return OrderTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        shipping_amount=shipping_amount,
        cod_charge=cod_charge,
        discount_amount=discount_amount,
        total_amount=round(total, 2),
    )
