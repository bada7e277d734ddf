"""
User-configurable build options ("user defines") and their factory.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class UserDefineKey(str, Enum):
    BINDING_PHRASE = "BINDING_PHRASE"
    REGULATORY_DOMAIN_AU_915 = "REGULATORY_DOMAIN_AU_915"
    REGULATORY_DOMAIN_EU_868 = "REGULATORY_DOMAIN_EU_868"
    REGULATORY_DOMAIN_IN_866 = "REGULATORY_DOMAIN_IN_866"
    REGULATORY_DOMAIN_FCC_915 = "REGULATORY_DOMAIN_FCC_915"
    REGULATORY_DOMAIN_EU_CE_2400 = "REGULATORY_DOMAIN_EU_CE_2400"
    REGULATORY_DOMAIN_ISM_2400 = "REGULATORY_DOMAIN_ISM_2400"
    HOME_WIFI_SSID = "HOME_WIFI_SSID"
    HOME_WIFI_PASSWORD = "HOME_WIFI_PASSWORD"
    AUTO_WIFI_ON_INTERVAL = "AUTO_WIFI_ON_INTERVAL"
    DISABLE_ALL_BEEPS = "DISABLE_ALL_BEEPS"
    JUST_BEEP_ONCE = "JUST_BEEP_ONCE"
    MY_STARTUP_MELODY = "MY_STARTUP_MELODY"
    UNLOCK_HIGHER_POWER = "UNLOCK_HIGHER_POWER"
    USE_R9MM_R9MINI_SBUS = "USE_R9MM_R9MINI_SBUS"
    TLM_REPORT_INTERVAL_MS = "TLM_REPORT_INTERVAL_MS"
    UART_INVERTED = "UART_INVERTED"
    RCVR_UART_BAUD = "RCVR_UART_BAUD"
    RCVR_INVERT_TX = "RCVR_INVERT_TX"
    LOCK_ON_FIRST_CONNECTION = "LOCK_ON_FIRST_CONNECTION"


class UserDefineKind(str, Enum):
    Boolean = "Boolean"
    Text = "Text"
    Enum = "Enum"


class UserDefineOptionGroup(str, Enum):
    RegulatoryDomain900 = "RegulatoryDomain900"
    RegulatoryDomain2400 = "RegulatoryDomain2400"


@dataclass(frozen=True)
class UserDefine:
    type: UserDefineKind
    key: UserDefineKey
    enabled: bool = False
    value: Optional[str] = None
    enum_values: Optional[List[str]] = None
    option_group: Optional[UserDefineOptionGroup] = None
    sensitive: bool = False


@dataclass(frozen=True)
class _Template:
    type: UserDefineKind
    enabled: bool = False
    value: Optional[str] = None
    enum_values: Optional[List[str]] = field(default=None)
    option_group: Optional[UserDefineOptionGroup] = None
    sensitive: bool = False


_Boolean = UserDefineKind.Boolean
_Text = UserDefineKind.Text
_RD900 = UserDefineOptionGroup.RegulatoryDomain900
_RD2400 = UserDefineOptionGroup.RegulatoryDomain2400

USER_DEFINE_TEMPLATES: Dict[UserDefineKey, _Template] = {
    UserDefineKey.BINDING_PHRASE: _Template(_Text, sensitive=True),
    UserDefineKey.REGULATORY_DOMAIN_AU_915: _Template(_Boolean, option_group=_RD900),
    UserDefineKey.REGULATORY_DOMAIN_EU_868: _Template(_Boolean, option_group=_RD900),
    UserDefineKey.REGULATORY_DOMAIN_IN_866: _Template(_Boolean, option_group=_RD900),
    UserDefineKey.REGULATORY_DOMAIN_FCC_915: _Template(
        _Boolean, enabled=True, option_group=_RD900
    ),
    UserDefineKey.REGULATORY_DOMAIN_EU_CE_2400: _Template(
        _Boolean, option_group=_RD2400
    ),
    UserDefineKey.REGULATORY_DOMAIN_ISM_2400: _Template(
        _Boolean, enabled=True, option_group=_RD2400
    ),
    UserDefineKey.HOME_WIFI_SSID: _Template(_Text),
    UserDefineKey.HOME_WIFI_PASSWORD: _Template(_Text, sensitive=True),
    UserDefineKey.AUTO_WIFI_ON_INTERVAL: _Template(_Text, enabled=True, value="60"),
    UserDefineKey.DISABLE_ALL_BEEPS: _Template(_Boolean),
    UserDefineKey.JUST_BEEP_ONCE: _Template(_Boolean),
    UserDefineKey.MY_STARTUP_MELODY: _Template(_Text),
    UserDefineKey.UNLOCK_HIGHER_POWER: _Template(_Boolean),
    UserDefineKey.USE_R9MM_R9MINI_SBUS: _Template(_Boolean),
    UserDefineKey.TLM_REPORT_INTERVAL_MS: _Template(_Text, value="240LU"),
    UserDefineKey.UART_INVERTED: _Template(_Boolean, enabled=True),
    UserDefineKey.RCVR_UART_BAUD: _Template(_Text, value="420000"),
    UserDefineKey.RCVR_INVERT_TX: _Template(_Boolean),
    UserDefineKey.LOCK_ON_FIRST_CONNECTION: _Template(_Boolean, enabled=True),
}


class TargetUserDefinesFactory:
    """Builds fresh UserDefine values from the fixed template table."""

    def __init__(self, templates: Optional[Dict[UserDefineKey, _Template]] = None):
        self.templates = USER_DEFINE_TEMPLATES if templates is None else templates

    def build(self, key: UserDefineKey) -> UserDefine:
        """
        Raises:
            ValueError: `key` has no template; this is a programming error.
        """
        template = self.templates.get(key)
        if template is None:
            raise ValueError(f"no user define template for key {key!r}")
        return UserDefine(
            type=template.type,
            key=key,
            enabled=template.enabled,
            value=template.value,
            enum_values=(
                list(template.enum_values) if template.enum_values is not None else None
            ),
            option_group=template.option_group,
            sensitive=template.sensitive,
        )
