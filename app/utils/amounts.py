# app/utils/amounts.py
"""
Aritmética de montos en punto fijo.

Cantidades de las líneas de deuda: 3 decimales. Precios, totales, montos
pagados y montos cubiertos: 0 decimales (unidades enteras de moneda).

Regla de redondeo: el total de una deuda es la suma exacta de
``cantidad * precio`` de sus líneas, redondeada una sola vez a unidades
enteras con ROUND_HALF_UP. Las líneas no se redondean individualmente.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple, Union

ZERO = Decimal("0")
MONEY_STEP = Decimal("1")

Number = Union[Decimal, int, str]


def as_decimal(value: Number) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def to_money(value: Number) -> Decimal:
    return as_decimal(value).quantize(MONEY_STEP, rounding=ROUND_HALF_UP)


def is_whole(value: Decimal) -> bool:
    return value == value.to_integral_value()


def has_max_places(value: Decimal, places: int) -> bool:
    return value == value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def line_total(quantity: Number, unit_price: Number) -> Decimal:
    """Total exacto de una línea, sin redondear."""
    return as_decimal(quantity) * as_decimal(unit_price)


def debt_total(lines: Iterable[Tuple[Number, Number]]) -> Decimal:
    """Total de una deuda a partir de pares (cantidad, precio unitario)."""
    exact = sum((line_total(q, p) for q, p in lines), ZERO)
    return to_money(exact)


@dataclass(frozen=True)
class Coverage:
    total: Decimal
    covered: Decimal

    @property
    def remaining(self) -> Decimal:
        # Nunca es negativo por construcción; el piso es solo para mostrar
        return max(self.total - self.covered, ZERO)

    def remaining_excluding(self, prior_amount: Decimal) -> Decimal:
        """Pendiente si no existiera una asignación previa de ``prior_amount``."""
        return self.total - (self.covered - prior_amount)
