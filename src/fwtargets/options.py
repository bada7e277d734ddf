"""
Deriving the user defines that apply to a target.

The binding phrase always comes first. Each DerivationRule then appends its
keys when its predicate matches; rules are independent and evaluated in
table order, so several may fire for one target.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from fwtargets.constants import (
    FEATURE_BUZZER,
    FEATURE_SBUS_UART,
    FEATURE_UNLOCK_HIGHER_POWER,
    TARGET_FRAGMENT_2400,
    TARGET_FRAGMENT_900,
    TARGET_FRAGMENT_RX,
    TARGET_FRAGMENT_TX,
    WIFI_PLATFORMS,
)
from fwtargets.models import DeviceDescription
from fwtargets.user_defines import TargetUserDefinesFactory, UserDefine, UserDefineKey

RulePredicate = Callable[[str, DeviceDescription], bool]


@dataclass(frozen=True)
class DerivationRule:
    name: str
    predicate: RulePredicate
    keys: Tuple[UserDefineKey, ...]

    def applies(self, target: str, config: DeviceDescription) -> bool:
        return self.predicate(target, config)


def target_contains(fragment: str) -> RulePredicate:
    """Case-sensitive substring match on the target id."""
    return lambda target, _config: fragment in target


def platform_in(platforms: Sequence[str]) -> RulePredicate:
    return lambda _target, config: config.platform in platforms


def has_feature(feature: str) -> RulePredicate:
    return lambda _target, config: config.has_feature(feature)


DEFAULT_RULES: Tuple[DerivationRule, ...] = (
    DerivationRule(
        "regulatory-domain-2400",
        target_contains(TARGET_FRAGMENT_2400),
        (
            UserDefineKey.REGULATORY_DOMAIN_EU_CE_2400,
            UserDefineKey.REGULATORY_DOMAIN_ISM_2400,
        ),
    ),
    DerivationRule(
        "regulatory-domain-900",
        target_contains(TARGET_FRAGMENT_900),
        (
            UserDefineKey.REGULATORY_DOMAIN_AU_915,
            UserDefineKey.REGULATORY_DOMAIN_EU_868,
            UserDefineKey.REGULATORY_DOMAIN_FCC_915,
            UserDefineKey.REGULATORY_DOMAIN_IN_866,
        ),
    ),
    # HOME_WIFI_SSID twice and no HOME_WIFI_PASSWORD matches the emitted output
    # of the existing service.
    DerivationRule(
        "wifi",
        platform_in(WIFI_PLATFORMS),
        (
            UserDefineKey.HOME_WIFI_SSID,
            UserDefineKey.HOME_WIFI_SSID,
            UserDefineKey.AUTO_WIFI_ON_INTERVAL,
        ),
    ),
    DerivationRule(
        "buzzer",
        has_feature(FEATURE_BUZZER),
        (
            UserDefineKey.DISABLE_ALL_BEEPS,
            UserDefineKey.JUST_BEEP_ONCE,
            UserDefineKey.MY_STARTUP_MELODY,
        ),
    ),
    DerivationRule(
        "unlock-higher-power",
        has_feature(FEATURE_UNLOCK_HIGHER_POWER),
        (UserDefineKey.UNLOCK_HIGHER_POWER,),
    ),
    DerivationRule(
        "sbus-uart",
        has_feature(FEATURE_SBUS_UART),
        (UserDefineKey.USE_R9MM_R9MINI_SBUS,),
    ),
    DerivationRule(
        "transmitter",
        target_contains(TARGET_FRAGMENT_TX),
        (
            UserDefineKey.TLM_REPORT_INTERVAL_MS,
            UserDefineKey.UART_INVERTED,
        ),
    ),
    DerivationRule(
        "receiver",
        target_contains(TARGET_FRAGMENT_RX),
        (
            UserDefineKey.RCVR_UART_BAUD,
            UserDefineKey.RCVR_INVERT_TX,
            UserDefineKey.LOCK_ON_FIRST_CONNECTION,
        ),
    ),
)


def derive_user_define_keys(
    target: str,
    config: DeviceDescription,
    rules: Sequence[DerivationRule] = DEFAULT_RULES,
) -> List[UserDefineKey]:
    keys = [UserDefineKey.BINDING_PHRASE]
    for rule in rules:
        if rule.applies(target, config):
            keys.extend(rule.keys)
    return keys


def derive_user_defines(
    target: str,
    config: DeviceDescription,
    rules: Sequence[DerivationRule] = DEFAULT_RULES,
    factory: Optional[TargetUserDefinesFactory] = None,
) -> List[UserDefine]:
    """
    Return the ordered user defines applicable to `target`.

    Pure: the same target and config always give an equal list.

    Parameters:
        target (str): Device id such as "happymodel.tx_2400.es24tx".
        config (DeviceDescription): The device's raw configuration.
        rules: Rule table to evaluate; defaults to DEFAULT_RULES.
        factory: UserDefine factory; a default one is created when omitted.
    """
    factory = factory or TargetUserDefinesFactory()
    return [factory.build(key) for key in derive_user_define_keys(target, config, rules)]
