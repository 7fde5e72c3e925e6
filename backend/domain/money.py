"""
Money value object.

All amounts cross the gateway and the mail templates through this type so
the ×100 / ÷100 conversions live in exactly one place. Amounts are held in
minor units (paise for INR) as integers; Decimal is used for the major-unit
side to avoid floating-point error.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from domain.constants import DEFAULT_CURRENCY, MINOR_UNITS_PER_MAJOR


@dataclass(frozen=True)
class Money:
    minor: int
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        if isinstance(self.minor, bool) or not isinstance(self.minor, int):
            raise TypeError(f"Money.minor must be an int, got {type(self.minor).__name__}")

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> "Money":
        return cls(0, currency)

    @classmethod
    def from_major(cls, amount, currency: str = DEFAULT_CURRENCY) -> "Money":
        """
        Build from a major-unit amount (rupees).

        Raises ValueError if the amount is not a number or has finer
        precision than one minor unit.
        """
        try:
            major = Decimal(str(amount))
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Invalid amount: {amount!r}") from e
        if not major.is_finite():
            raise ValueError(f"Invalid amount: {amount!r}")

        minor = major * MINOR_UNITS_PER_MAJOR
        if minor != minor.to_integral_value():
            raise ValueError(f"Amount {amount!r} is not representable in minor units")
        return cls(int(minor), currency)

    @property
    def major(self) -> Decimal:
        """Amount in major units, e.g. Decimal('800') for 80000 paise."""
        value = Decimal(self.minor) / MINOR_UNITS_PER_MAJOR
        return value.quantize(Decimal(1)) if self.minor % MINOR_UNITS_PER_MAJOR == 0 else value

    @property
    def is_positive(self) -> bool:
        return self.minor > 0

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        if other.currency != self.currency:
            raise ValueError(f"Currency mismatch: {self.currency} + {other.currency}")
        return Money(self.minor + other.minor, self.currency)

    def __str__(self) -> str:
        return f"{self.major} {self.currency}"
