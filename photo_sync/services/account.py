"""Account privilege flag.

Set externally (purchase flow, settings toggle). Privileged accounts have no
favorite quota and no pagination ceiling.
"""

from dataclasses import dataclass


@dataclass
class Account:
    privileged: bool = False
