"""
Steam Trust Check - Gaming Region Mapping

Static partition of ISO country codes into coarse gaming regions.
Order matters: the first region containing the code wins, so countries
listed in two sets (BY, MD, UA) resolve to CIS.
"""
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, FrozenSet, Tuple


@dataclass(frozen=True)
class RegionBucket:
    code: str
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_REGIONS: Tuple[Tuple[str, str, FrozenSet[str]], ...] = (
    ("BR", "Brazil (BR)", frozenset({"BR"})),
    ("CIS", "CIS (Russia, Ukraine, nearby states)", frozenset({
        "RU", "UA", "BY", "KZ", "AM", "AZ", "GE", "MD", "KG", "TJ", "TM", "UZ",
    })),
    ("NA", "North America (NA)", frozenset({"US", "CA", "MX"})),
    ("LATAM", "Latin America (LATAM)", frozenset({
        "AR", "BO", "CL", "CO", "CR", "CU", "DO", "EC", "SV", "GT", "HN", "NI",
        "PA", "PY", "PE", "PR", "UY", "VE", "GY", "SR", "BZ",
    })),
    ("MENA", "Middle East & North Africa (MENA)", frozenset({
        "AE", "BH", "DZ", "EG", "IL", "IQ", "IR", "JO", "KW", "LB", "LY", "MA",
        "OM", "PS", "QA", "SA", "SD", "SY", "TN", "TR", "YE",
    })),
    ("EU", "Europe (EU)", frozenset({
        "AL", "AD", "AT", "BA", "BE", "BG", "BY", "CH", "CY", "CZ", "DE", "DK",
        "EE", "ES", "FI", "FR", "GB", "GR", "HR", "HU", "IE", "IS", "IT", "LI",
        "LT", "LU", "LV", "MC", "MD", "ME", "MK", "MT", "NL", "NO", "PL", "PT",
        "RO", "RS", "SE", "SI", "SK", "SM", "UA", "VA",
    })),
    ("EA", "East Asia (EA)", frozenset({"JP", "KR", "CN", "TW", "HK", "MO"})),
    ("APAC", "Asia-Pacific (APAC)", frozenset({
        "AU", "NZ", "SG", "PH", "TH", "VN", "MY", "ID", "BN", "KH", "LA", "MM",
        "IN", "PK", "BD", "LK", "NP", "MN",
    })),
)


def region_from_country_code(country_code: Optional[str]) -> Optional[RegionBucket]:
    """Two-letter country code -> RegionBucket, or None when unmapped."""
    if not country_code:
        return None
    code = str(country_code).strip().upper()
    for region_code, label, members in _REGIONS:
        if code in members:
            return RegionBucket(code=region_code, label=label)
    return None
