"""
Data model for the host-supplied environment.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class HostEnvironment:
    """
    What the Host tells the controller about its surroundings.

    Attributes:
        locale (str): Locale tag such as "en_US" or "de-DE". Selects AM/PM texts.
        use_24_hour (bool): System 24-hour policy.
    """
    locale: str = "en_US"
    use_24_hour: bool = False
