"""
Calendrier des interventions : regroupe, par client, les échéances
(validité, contrôle, recharge) tombant dans un mois donné ou déjà dépassées.
"""
import calendar
from datetime import date
from typing import Iterable, List, Optional

from pydantic import BaseModel

from .compliance import Severity, evaluate, to_local_date

MONTH_NAMES = [
    "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
    "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
]
MONTH_SHORT_NAMES = [
    "Jan", "Fév", "Mar", "Avr", "Mai", "Jun",
    "Jul", "Aoû", "Sep", "Oct", "Nov", "Déc",
]

# Ordre d'affichage des échéances d'un même équipement
TRACK_ORDER = {"validity": 0, "control": 1, "recharge": 2}


class Action(BaseModel):
    equipment_id: int
    equipment_number: int
    material_type: str
    action_type: str
    action_label: str
    due_date: date
    is_overdue: bool
    days_difference: int
    severity: Severity


class ClientActions(BaseModel):
    client_id: int
    client_name: str
    client_location: str
    contact_name: str
    phone: Optional[str] = None
    actions: List[Action]
    total_actions: int
    has_overdue: bool
    highest_severity: Severity


class MonthData(BaseModel):
    month: int
    year: int
    name: str
    short_name: str
    is_selected: bool
    is_current: bool


def month_bounds(month: int, year: int):
    if not 1 <= month <= 12:
        raise ValueError(f"Mois invalide : {month} (attendu 1-12)")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def _label(action_type: str, track) -> str:
    if action_type == "validity":
        return "Renouvellement matériel"
    if action_type == "control":
        return "Premier contrôle" if track.has_never_been_controlled else "Contrôle périodique"
    return "Première recharge" if track.has_never_been_recharged else "Recharge"


def _action_severity(action_type: str, is_overdue: bool) -> Severity:
    if action_type == "validity":
        return Severity.CRITICAL if is_overdue else Severity.MODERATE
    return Severity.IMPORTANT if is_overdue else Severity.ATTENTION


def equipment_actions(equipment, month: int, year: int, now) -> List[Action]:
    """Échéances d'un équipement à afficher pour le mois sélectionné."""
    start, end = month_bounds(month, year)
    today = to_local_date(now)
    current_or_past = (year, month) <= (today.year, today.month)

    ev = evaluate(equipment, now=now)
    tracks = [("validity", ev.validity), ("control", ev.control)]
    if ev.recharge.applicable:
        tracks.append(("recharge", ev.recharge))

    material_type = getattr(equipment.material.type, "value", equipment.material.type)
    actions = []
    for action_type, track in tracks:
        in_month = start <= track.due_date <= end
        # Un retard n'est jamais reporté sur un mois futur
        if not in_month and not (track.is_expired and current_or_past):
            continue
        actions.append(Action(
            equipment_id=equipment.id,
            equipment_number=equipment.number,
            material_type=material_type,
            action_type=action_type,
            action_label=_label(action_type, track),
            due_date=track.due_date,
            is_overdue=track.is_expired,
            days_difference=track.days_overdue if track.is_expired else track.days_remaining,
            severity=_action_severity(action_type, track.is_expired),
        ))
    return actions


def _action_key(a: Action):
    return (not a.is_overdue, a.due_date, a.equipment_number, TRACK_ORDER[a.action_type], a.equipment_id)


def _client_key(c: ClientActions):
    return (not c.has_overdue, -c.total_actions, c.client_name, c.client_id)


def clients_with_actions(clients: Iterable, month: int, year: int, now) -> List[ClientActions]:
    """
    Liste triée des clients ayant au moins une action sur la période :
    retards d'abord, puis nombre d'actions décroissant.
    """
    month_bounds(month, year)
    result = []
    for client in clients:
        actions = []
        for equipment in client.equipments:
            actions.extend(equipment_actions(equipment, month, year, now))
        if not actions:
            continue

        actions.sort(key=_action_key)
        result.append(ClientActions(
            client_id=client.id,
            client_name=client.name,
            client_location=client.location,
            contact_name=client.contact_name,
            phone=client.phone,
            actions=actions,
            total_actions=len(actions),
            has_overdue=any(a.is_overdue for a in actions),
            highest_severity=min((a.severity for a in actions), key=lambda s: s.rank),
        ))

    result.sort(key=_client_key)
    return result


def available_years(now) -> List[int]:
    """Deux années passées, l'année en cours et trois années futures."""
    year = to_local_date(now).year
    return list(range(year - 2, year + 4))


def calendar_months(selected_month: int, selected_year: int, now) -> List[MonthData]:
    today = to_local_date(now)
    return [
        MonthData(
            month=i + 1,
            year=selected_year,
            name=name,
            short_name=MONTH_SHORT_NAMES[i],
            is_selected=selected_month == i + 1,
            is_current=today.month == i + 1 and today.year == selected_year,
        )
        for i, name in enumerate(MONTH_NAMES)
    ]
