"""
Route 53 change batch building.

Turns discovered services into one UPSERT A change per service. Services
without addresses are left out, since an A record needs at least one value.
"""

import json
from dataclasses import dataclass, field

from tabulate import tabulate

from ecs_service_discovery.discovery import DiscoveredService
from ecs_service_discovery.naming import NameResolver


DEFAULT_TTL = 5


@dataclass
class DesiredRecord:
    name: str
    addresses: list[str] = field(default_factory=list)
    ttl: int | None = None
    type: str = "A"


def unique(addresses: list[str]) -> list[str]:
    """Drop repeated addresses, keeping first-seen order."""
    return list(dict.fromkeys(addresses))


def desired_records(
    services: list[DiscoveredService],
    resolver: NameResolver,
    zone: str,
    ttl: int | None = None,
    dedupe: bool = False,
) -> list[DesiredRecord]:
    records = []
    for discovered in services:
        addresses = discovered.addresses
        if dedupe:
            addresses = unique(addresses)
        records.append(
            DesiredRecord(
                name=resolver.record_name(discovered.name, zone),
                addresses=addresses,
                ttl=ttl,
            )
        )
    return records


def build_change(record: DesiredRecord, default_ttl: int = DEFAULT_TTL) -> dict | None:
    """UPSERT change for a record, or None when it has no addresses."""
    if not record.addresses:
        return None

    return {
        "Action": "UPSERT",
        "ResourceRecordSet": {
            "Name": record.name,
            "Type": record.type,
            "TTL": record.ttl if record.ttl is not None else default_ttl,
            "ResourceRecords": [{"Value": ip} for ip in record.addresses],
        },
    }


def build_change_batch(
    records: list[DesiredRecord],
    default_ttl: int = DEFAULT_TTL,
    comment: str | None = None,
) -> dict | None:
    """
    Build a change batch from desired records.

    Args:
        records: Desired records in discovery order
        default_ttl: TTL for records without an explicit one
        comment: Optional change batch comment

    Returns:
        Route 53 ChangeBatch dict, or None when no change remains
    """
    changes = [c for c in (build_change(r, default_ttl) for r in records) if c]
    if not changes:
        return None

    batch: dict = {}
    if comment:
        batch["Comment"] = comment
    batch["Changes"] = changes
    return batch


def format_change_batch(batch: dict) -> str:
    return json.dumps(batch, indent=2)


def summarize_change_batch(batch: dict) -> str:
    """Table of the records in a change batch"""
    rows = []
    for change in batch.get("Changes", []):
        rrset = change["ResourceRecordSet"]
        values = ", ".join(rr["Value"] for rr in rrset.get("ResourceRecords", []))
        rows.append(
            [change["Action"], rrset["Name"], rrset["Type"], rrset["TTL"], values]
        )
    return tabulate(
        rows, headers=["Action", "Name", "Type", "TTL", "Values"], tablefmt="simple"
    )
