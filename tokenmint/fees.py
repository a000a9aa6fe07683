# tokenmint/fees.py
"""
Fee gate for minting.

The check only decides whether a mint may proceed; crediting the attached
value is left to the mint operation.
"""

from typing import Optional

from .errors import InvalidFee
from .exemptions import ExemptionRegistry


def check(
    caller: str,
    admin: Optional[str],
    fee: int,
    exemptions: ExemptionRegistry,
    attached_value: int,
) -> None:
    """
    Validate the value attached to a mint.

    Passes if the caller is the admin, is exempt, or attached at least the
    fee. Raises InvalidFee otherwise.
    """
    if attached_value < 0:
        raise ValueError(f"Attached value cannot be negative: {attached_value}")
    if admin is not None and caller == admin:
        return
    if exemptions.is_exempt(caller):
        return
    if attached_value >= fee:
        return
    raise InvalidFee(f"attached {attached_value}, fee is {fee}")
