from datetime import timezone
from typing import Iterable, List, Optional

from pydantic import BaseModel

from .compliance import EquipmentEvaluation, Severity, evaluate, to_local_date


class UrgentEquipment(BaseModel):
    equipment_id: int
    equipment_number: int
    client_id: int
    client_name: str
    material_type: str
    severity: Severity
    status_type: str


def fleet_stats(clients: Iterable, materials: Iterable, now) -> dict:
    """Indicateurs du tableau de bord, calculés à partir des clients et de leur parc."""
    today = to_local_date(now)
    start_of_month = today.replace(day=1)

    clients = list(clients)
    materials = list(materials)

    new_clients = 0
    by_severity = {s.value: 0 for s in Severity}
    counts = {"total": 0, "expired": 0, "expiring_soon": 0, "valid": 0,
              "controls_overdue": 0, "recharges_overdue": 0}
    urgent: List[tuple] = []

    for client in clients:
        created = getattr(client, "created_at", None)
        if created is not None and created.tzinfo is None:
            # Stocké en UTC naïf (datetime.utcnow)
            created = created.replace(tzinfo=timezone.utc)
        if created is not None and to_local_date(created) >= start_of_month:
            new_clients += 1

        for equipment in client.equipments:
            ev: EquipmentEvaluation = evaluate(equipment, now=now)
            counts["total"] += 1

            if ev.validity.is_expired:
                counts["expired"] += 1
            elif ev.validity.is_due_soon:
                counts["expiring_soon"] += 1
            else:
                counts["valid"] += 1

            if ev.control.is_expired:
                counts["controls_overdue"] += 1
            if ev.recharge.applicable and ev.recharge.is_expired:
                counts["recharges_overdue"] += 1

            by_severity[ev.severity.value] += 1
            if ev.severity in (Severity.CRITICAL, Severity.IMPORTANT):
                urgent.append((client, equipment, ev))

    urgent.sort(key=lambda t: (t[2].severity.rank, t[0].name, t[1].number, t[1].id))

    def _type(m) -> Optional[str]:
        return getattr(m.type, "value", m.type)

    material_types = [_type(m) for m in materials]

    return {
        "clients": {"total": len(clients), "new_this_month": new_clients},
        "equipments": {**counts, "by_severity": by_severity},
        "materials": {
            "total": len(materials),
            "pa_types": material_types.count("PA"),
            "pp_types": material_types.count("PP"),
            "alarm_types": material_types.count("ALARM"),
            "co2_types": material_types.count("CO2"),
        },
        "urgent": [
            UrgentEquipment(
                equipment_id=e.id,
                equipment_number=e.number,
                client_id=c.id,
                client_name=c.name,
                material_type=_type(e.material),
                severity=ev.severity,
                status_type=ev.status_type,
            )
            for c, e, ev in urgent
        ],
    }
