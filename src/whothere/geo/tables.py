"""Static lookup tables for the builtin geo resolver.

The builtin resolver is deliberately tiny. Ranges are /16 or wider so that
lookups still resolve after full anonymization.
"""

import ipaddress

UNKNOWN_COUNTRY_NAME = "Unknown"

# "XX" marks addresses that cannot be placed (private ranges)
BUILTIN_IP_COUNTRIES = tuple(
    (ipaddress.ip_network(cidr), country)
    for cidr, country in (
        ("8.8.0.0/16", "US"),
        ("1.1.0.0/16", "AU"),
        ("10.0.0.0/8", "XX"),
        ("172.16.0.0/12", "XX"),
        ("192.168.0.0/16", "XX"),
        ("2001:4860::/32", "US"),
    )
)

COUNTRY_NAMES = {
    "US": "United States",
    "GB": "United Kingdom",
    "CA": "Canada",
    "AU": "Australia",
    "DE": "Germany",
    "FR": "France",
    "JP": "Japan",
    "XX": UNKNOWN_COUNTRY_NAME,
}

CITY_TIMEZONES = {
    ("US", "San Francisco"): "America/Los_Angeles",
    ("US", "New York"): "America/New_York",
    ("GB", "London"): "Europe/London",
}

COUNTRY_TIMEZONES = {
    "US": "America/New_York",
    "GB": "Europe/London",
    "CA": "America/Toronto",
    "AU": "Australia/Sydney",
    "DE": "Europe/Berlin",
    "FR": "Europe/Paris",
    "JP": "Asia/Tokyo",
}

# Sample ranges for the VPN vote; callers pass their own tables for real data.
VPN_RANGES = (
    "185.220.100.0/22",
    "104.131.0.0/16",
    "45.83.0.0/16",
)

HOSTING_PROVIDER_RANGES = (
    "104.131.0.0/16",
    "159.203.0.0/16",
    "138.68.0.0/16",
    "45.83.0.0/16",
)

DATACENTER_RANGES = (
    "185.220.100.0/22",
    "88.198.0.0/16",
    "51.68.0.0/16",
    "45.83.0.0/16",
)


def country_name(code) -> str:
    """Display name for a country code, "Unknown" when not in the table."""
    return COUNTRY_NAMES.get(code, UNKNOWN_COUNTRY_NAME)
