from decimal import Decimal
from typing import Annotated

from pydantic import Field

# Montos en unidades enteras de moneda; cantidades con hasta 3 decimales
Money = Annotated[Decimal, Field(max_digits=18, decimal_places=0)]
Quantity = Annotated[Decimal, Field(max_digits=18, decimal_places=3)]
