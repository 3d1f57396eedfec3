"""
Carrier detection based on tracking number format
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple
from urllib.parse import quote

from ...constants import UNIVERSAL_TRACKER_URL
from ...models import CarrierMatch, CarrierTag


@dataclass(frozen=True)
class CarrierRule:
    """One row of a carrier rule table. Rules are tried in table order."""
    tag: CarrierTag
    pattern: Pattern[str]
    redirect_url_template: Optional[str] = None

    def matches(self, identifier: str) -> bool:
        return self.pattern.search(identifier) is not None


SRILANKAN_CARGO_RULE = CarrierRule(
    tag=CarrierTag.SRILANKAN_CARGO,
    pattern=re.compile(r"^160"),
    redirect_url_template="https://www.srilankancargo.com/tracking?awb={id}",
)

UPS_RULE = CarrierRule(
    tag=CarrierTag.UPS,
    pattern=re.compile(r"^1Z", re.IGNORECASE),
    redirect_url_template="https://www.ups.com/track?tracknum={id}",
)

# Digit-count heuristics can collide across couriers; table order decides.
# The web tracker tested the character class /^[JJ|GM|JVGL]/i, which matches
# any id starting with J, G, M, V, L or "|". Here the brand prefixes are
# matched as whole tokens instead.
DHL_RULE = CarrierRule(
    tag=CarrierTag.DHL,
    pattern=re.compile(r"^(?:\d{10,11}$|JJD|JVGL|GM)", re.IGNORECASE),
    redirect_url_template=(
        "https://www.dhl.com/global-en/home/tracking/tracking-express.html"
        "?submit=1&tracking-id={id}"
    ),
)

FEDEX_RULE = CarrierRule(
    tag=CarrierTag.FEDEX,
    pattern=re.compile(r"^\d{12,15}$"),
    redirect_url_template="https://www.fedex.com/fedextrack/?trknbr={id}",
)

STANDARD_RULES: Tuple[CarrierRule, ...] = (SRILANKAN_CARGO_RULE, UPS_RULE)
NUMERIC_FIRST_RULES: Tuple[CarrierRule, ...] = (
    SRILANKAN_CARGO_RULE,
    UPS_RULE,
    DHL_RULE,
    FEDEX_RULE,
)

RULE_SETS = {
    "standard": STANDARD_RULES,
    "numeric_first": NUMERIC_FIRST_RULES,
}

# Substring of the carrier name -> tracking page. First hit wins.
VIEWER_URLS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("dhl",), "https://www.dhl.com/en/express/tracking.html?AWB={id}&brand=DHL"),
    (("fedex",), "https://www.fedex.com/fedextrack/?trknbr={id}"),
    (("ups",), "https://www.ups.com/track?tracknum={id}"),
    (("usps",), "https://tools.usps.com/go/TrackConfirmAction?tLabels={id}"),
    (("royal mail", "royalmail"), "https://www.royalmail.com/track-your-item#/tracking-results/{id}"),
    (("tnt",), "https://www.tnt.com/express/en_gb/site/shipping-tools/track.html?searchType=con&cons={id}"),
    (("aramex",), "https://www.aramex.com/us/en/track/results?ShipmentNumber={id}"),
    (("qatar", "qr"), "https://www.qrcargo.com/s/track-shipment?awb={id}"),
    (("emirates", "ek"), "https://cargo.emirates.com/en/tracking/?awb={id}"),
    (("sri lankan", "ul"), "https://www.srilankancargo.com/tracking?awb={id}"),
    (("aftership",), "https://track.aftership.com/{id}"),
)


def get_rules(rule_set: str = "standard") -> Tuple[CarrierRule, ...]:
    """Look up a named rule table."""
    try:
        return RULE_SETS[rule_set]
    except KeyError:
        raise ValueError(
            f"Unknown carrier rule set '{rule_set}'. Expected one of: {', '.join(RULE_SETS)}"
        )


def normalize_tracking_number(tracking_number: Optional[str]) -> str:
    """Trim surrounding whitespace. No other validation is applied."""
    return (tracking_number or "").strip()


def match_carrier(
    tracking_number: str,
    rules: Tuple[CarrierRule, ...] = STANDARD_RULES,
) -> CarrierMatch:
    """
    Classify a tracking number against an ordered rule table.

    Args:
        tracking_number: The trimmed identifier
        rules: Rule table; the first satisfied rule wins

    Returns:
        CarrierMatch, empty when no rule fires
    """
    for rule in rules:
        if rule.matches(tracking_number):
            return CarrierMatch(
                carrier_tag=rule.tag,
                redirect_url_template=rule.redirect_url_template,
            )
    return CarrierMatch()


def get_fallback_url(tracking_number: str) -> str:
    """Universal aggregator page for any tracking number."""
    return UNIVERSAL_TRACKER_URL.format(id=quote(tracking_number.strip(), safe=""))


def get_viewer_url(carrier: Optional[str], tracking_number: str) -> str:
    """
    Get the best tracking page for a free-text carrier name.

    Args:
        carrier: Carrier name as scraped or stored (may be None)
        tracking_number: Tracking number

    Returns:
        Brand-specific tracking URL, or the universal aggregator URL
    """
    name = (carrier or "").lower()
    encoded = quote(tracking_number.strip(), safe="")
    for needles, template in VIEWER_URLS:
        if any(needle in name for needle in needles):
            return template.format(id=encoded)
    return get_fallback_url(tracking_number)
