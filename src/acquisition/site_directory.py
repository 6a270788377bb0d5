"""
Site Directory Client

Lists the active stream gauges for a state/region from the USGS site
service, which answers in tab-delimited RDB format.
"""

import logging

from src.models import GaugeInfo
from src.utils.config import config
from src.utils.http_client import get_text

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
SITE_ID_COLUMN = "site_no"
SITE_NAME_COLUMN = "station_nm"


async def list_gauges(region_code: str) -> list[GaugeInfo]:
    """
    Fetch the active stream gauges reporting instantaneous values for a region.

    Args:
        region_code: Two-letter state code (e.g., "VT"); not validated

    Returns:
        List of GaugeInfo entries in directory order.

    Raises:
        NetworkError: On non-success status or timeout.
    """
    url = f"{config.usgs.base_url}/site/"
    params = {
        "format": "rdb",
        "stateCd": region_code,
        "siteType": "ST",
        "siteStatus": "active",
        "hasDataTypeCd": "iv",
    }

    text = await get_text(url, params=params, timeout=config.usgs.timeout_seconds)
    gauges = parse_site_directory(text)

    logger.info(f"Found {len(gauges)} gauges for region {region_code}")
    return gauges


def parse_site_directory(rdb_text: str) -> list[GaugeInfo]:
    """
    Parse an RDB site listing.

    Comment lines are skipped, the first remaining line is the header, and the
    line after it (RDB column widths/types) is skipped before data rows.

    Args:
        rdb_text: Raw response body

    Returns:
        List of GaugeInfo; empty if no header or no site_no column is found.
    """
    lines = rdb_text.split("\n")

    header_index = None
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped and not stripped.startswith(COMMENT_PREFIX):
            header_index = i
            break

    if header_index is None:
        logger.debug("No header row found in site directory response")
        return []

    headers = lines[header_index].rstrip("\r\n").split("\t")
    if SITE_ID_COLUMN not in headers:
        logger.debug(f"Site directory header has no {SITE_ID_COLUMN} column")
        return []

    site_idx = headers.index(SITE_ID_COLUMN)
    name_idx = headers.index(SITE_NAME_COLUMN) if SITE_NAME_COLUMN in headers else None

    gauges = []
    for line in lines[header_index + 2:]:
        line = line.rstrip("\r\n")
        if not line.strip():
            continue

        fields = line.split("\t")
        site_no = fields[site_idx].strip() if site_idx < len(fields) else ""
        if not site_no:
            continue

        station_name = ""
        if name_idx is not None and name_idx < len(fields):
            station_name = fields[name_idx].strip()

        gauges.append(GaugeInfo(id=site_no, name=station_name or site_no))

    return gauges
