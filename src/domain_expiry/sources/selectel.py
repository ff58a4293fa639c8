"""
Hostname source backed by the Selectel DNS API.

Authenticates against the Keystone identity service, lists enabled zones and
collects the names of enabled A and CNAME records.
"""

import logging
from typing import Any, Dict, List

import aiohttp

from .base import BaseSource, SourceError

logger = logging.getLogger(__name__)

AUTH_URL = "https://cloud.api.selcloud.ru/identity/v3/auth/tokens"
ZONES_URL = "https://api.selectel.ru/domains/v2/zones"
RRSET_URL = "https://api.selectel.ru/domains/v2/zones/{zone_id}/rrset"

ALLOWED_TYPES = frozenset({"A", "CNAME"})


def extract_zone_ids(payload: Dict[str, Any]) -> List[str]:
    """Return ids of enabled zones from a zone list response."""
    zones = []
    for zone in payload.get("result") or []:
        if zone.get("disabled", True):
            continue
        zone_id = zone.get("id")
        if isinstance(zone_id, str):
            zones.append(zone_id)
    return zones


def extract_record_names(payload: Dict[str, Any]) -> List[str]:
    """
    Return hostnames of enabled A/CNAME record sets.

    A record set counts as enabled when its first record is not disabled.
    """
    names = []
    for rrset in payload.get("result") or []:
        name = rrset.get("name")
        r_type = rrset.get("type")
        records = rrset.get("records") or []
        disabled = records[0].get("disabled", True) if records else True

        if isinstance(name, str) and r_type in ALLOWED_TYPES and not disabled:
            names.append(name.rstrip('.'))
    return names


class SelectelSource(BaseSource):
    """Loads hostnames from every enabled zone of a Selectel project."""

    source_name = "SelectelSource"

    def __init__(self, account_id: str, password: str, project_name: str, user: str, timeout: float = 30):
        self.account_id = account_id
        self.password = password
        self.project_name = project_name
        self.user = user
        self.timeout = timeout

    async def get_domains(self) -> List[str]:
        client_timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            token = await self._get_auth_token(session)
            zones = await self._get_zones(session, token)
            logger.debug(f"Selectel returned {len(zones)} enabled zone(s)")
            return await self._get_zone_domains(session, token, zones)

    def _auth_body(self) -> Dict[str, Any]:
        return {
            "auth": {
                "identity": {
                    "methods": ["password"],
                    "password": {
                        "user": {
                            "name": self.user,
                            "domain": {"name": self.account_id},
                            "password": self.password,
                        }
                    },
                },
                "scope": {
                    "project": {
                        "name": self.project_name,
                        "domain": {"name": self.account_id},
                    }
                },
            }
        }

    async def _get_auth_token(self, session: aiohttp.ClientSession) -> str:
        async with session.post(AUTH_URL, json=self._auth_body()) as resp:
            token = resp.headers.get("X-Subject-Token")
            if resp.status >= 300 or not token:
                body = await resp.text()
                logger.error(f"Selectel authentication failed: status={resp.status} body={body}")
                raise SourceError("Failed to authenticate with Selectel")
            return token

    async def _get_zones(self, session: aiohttp.ClientSession, token: str) -> List[str]:
        async with session.get(ZONES_URL, headers={"X-Auth-Token": token}) as resp:
            if resp.status >= 300:
                logger.error(f"Failed to list Selectel zones: status={resp.status}")
                raise SourceError("Failed to list Selectel zones")
            payload = await resp.json()
        return extract_zone_ids(payload)

    async def _get_zone_domains(
        self,
        session: aiohttp.ClientSession,
        token: str,
        zones: List[str]
    ) -> List[str]:
        domains = []
        for zone_id in zones:
            url = RRSET_URL.format(zone_id=zone_id)
            async with session.get(url, headers={"X-Auth-Token": token}) as resp:
                if resp.status >= 300:
                    logger.error(f"Failed to load records for zone {zone_id}: status={resp.status}")
                    continue
                payload = await resp.json()
            domains.extend(extract_record_names(payload))
        return domains
