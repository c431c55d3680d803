from typing import Dict
from valorant_dashboard.config.logging import get_logger
from valorant_dashboard.models.riot import UserInfo

logger = get_logger("riot_auth.region")

REGIONS = ("na", "eu", "ap", "kr", "br", "latam")
DEFAULT_REGION = "na"

# Both 2- and 3-letter codes appear in userinfo payloads
COUNTRY_TO_REGION: Dict[str, str] = {
    # North America
    "US": "na", "USA": "na",
    "CA": "na", "CAN": "na",
    "MX": "na", "MEX": "na",

    # Europe
    "GB": "eu", "GBR": "eu",
    "DE": "eu", "DEU": "eu",
    "FR": "eu", "FRA": "eu",
    "IT": "eu", "ITA": "eu",
    "ES": "eu", "ESP": "eu",
    "RU": "eu", "RUS": "eu",
    "TR": "eu", "TUR": "eu",
    "PL": "eu", "POL": "eu",
    "NL": "eu", "NLD": "eu",
    "SE": "eu", "SWE": "eu",
    "NO": "eu", "NOR": "eu",
    "DK": "eu", "DNK": "eu",
    "FI": "eu", "FIN": "eu",
    "UA": "eu", "UKR": "eu",

    # Asia Pacific
    "JP": "ap", "JPN": "ap",
    "CN": "ap", "CHN": "ap",
    "TW": "ap", "TWN": "ap",
    "HK": "ap", "HKG": "ap",
    "SG": "ap", "SGP": "ap",
    "TH": "ap", "THA": "ap",
    "VN": "ap", "VNM": "ap",
    "ID": "ap", "IDN": "ap",
    "MY": "ap", "MYS": "ap",
    "PH": "ap", "PHL": "ap",
    "IN": "ap", "IND": "ap",
    "AU": "ap", "AUS": "ap",
    "NZ": "ap", "NZL": "ap",

    # Korea
    "KR": "kr", "KOR": "kr",

    # Brazil
    "BR": "br", "BRA": "br",

    # Latin America
    "AR": "latam", "ARG": "latam",
    "CL": "latam", "CHL": "latam",
    "CO": "latam", "COL": "latam",
    "PE": "latam", "PER": "latam",
}


def determine_region(user_info: UserInfo) -> str:
    """Resolve the shard: affinity (pp, then live, then first entry) beats country."""
    if user_info.affinity:
        shard = (
            user_info.affinity.get("pp")
            or user_info.affinity.get("live")
            or next(iter(user_info.affinity.values()), None)
        )
        shard = (shard or "").lower()
        if shard in REGIONS:
            logger.debug("Using affinity shard", shard=shard)
            return shard
        logger.warning("Unrecognised affinity shard, falling back to country", shard=shard)

    country_code = (user_info.country or "").upper()
    region = COUNTRY_TO_REGION.get(country_code)
    if region:
        logger.debug("Mapped country to region", country=country_code, region=region)
        return region

    logger.warning("Unknown country code, defaulting region", country=country_code, region=DEFAULT_REGION)
    return DEFAULT_REGION
