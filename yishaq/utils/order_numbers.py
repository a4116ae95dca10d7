import re
import secrets
import time
from datetime import date

from yishaq import config

_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

ORDER_NUMBER_RE = re.compile(r"^[A-Z]+-\d{4}-[0-9A-Z]+$")


def to_base36(n: int) -> str:
    if n < 0:
        raise ValueError("negative value")
    if n == 0:
        return "0"
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(_ALPHABET[r])
    return "".join(reversed(digits))


def make_order_number(year: int | None = None, millis: int | None = None, suffix_length: int = 4) -> str:
    """Human readable order number: ``YSQ-<year>-<base36 ms timestamp><random suffix>``.

    Only probabilistically unique; the unique constraint on
    ``orders.order_number`` is what actually guarantees it.
    """
    year = year or date.today().year
    millis = int(time.time() * 1000) if millis is None else millis
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(suffix_length))
    return "{0}-{1}-{2}{3}".format(config.ORDER_NUMBER_PREFIX, year, to_base36(millis), suffix)
