"""
Calcul des échéances de conformité d'un équipement.

Trois échéances indépendantes sont suivies pour chaque équipement :

* validité : date de mise en service + durée de vie du matériel ;
* contrôle : dernière vérification (ou mise en service) + délai avant contrôle ;
* recharge : dernière recharge (ou mise en service) + délai avant recharge,
  uniquement pour les extincteurs PA ayant un délai de recharge.

Toutes les fonctions sont pures : la date de référence ``now`` est toujours
passée en paramètre et les enregistrements ne sont jamais modifiés. Elles
acceptent aussi bien les modèles SQLAlchemy que n'importe quel objet exposant
les mêmes attributs.
"""
import enum
from datetime import date, datetime, timedelta
from typing import Iterable, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel

from ..config import LOCAL_TZ

DUE_SOON_DAYS = 30
RECHARGEABLE_TYPE = "PA"


class Severity(str, enum.Enum):
    CRITICAL = "critical"
    IMPORTANT = "important"
    MODERATE = "moderate"
    ATTENTION = "attention"
    NORMAL = "normal"

    @property
    def rank(self) -> int:
        """0 = le plus grave."""
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [
    Severity.CRITICAL,
    Severity.IMPORTANT,
    Severity.MODERATE,
    Severity.ATTENTION,
    Severity.NORMAL,
]


class TrackStatus(BaseModel):
    is_expired: bool
    is_due_soon: bool
    due_date: date
    days_remaining: int
    days_overdue: int

    class Config:
        frozen = True


class ControlStatus(TrackStatus):
    has_never_been_controlled: bool


class RechargeStatus(TrackStatus):
    applicable: Literal[True] = True
    has_never_been_recharged: bool


class NotApplicable(BaseModel):
    """Recharge sans objet (matériel non PA ou sans délai de recharge)."""
    applicable: Literal[False] = False

    class Config:
        frozen = True


NOT_APPLICABLE = NotApplicable()


class EquipmentEvaluation(BaseModel):
    validity: TrackStatus
    control: ControlStatus
    recharge: Union[RechargeStatus, NotApplicable]
    severity: Severity
    status_type: str
    issue_count: int
    has_any_issue: bool

    class Config:
        frozen = True


# ============================================================================
# DATES
# ============================================================================

def to_local_date(value: Union[date, datetime]) -> date:
    """Ramène une date ou un datetime au jour calendaire du fuseau local."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(LOCAL_TZ)
        return value.date()
    return value


def _material_type(material) -> str:
    t = material.type
    return getattr(t, "value", t)


def _track(due_date: date, today: date) -> dict:
    is_expired = today > due_date
    delta = (due_date - today).days
    days_remaining = 0 if is_expired else delta
    return {
        "is_expired": is_expired,
        "is_due_soon": not is_expired and days_remaining <= DUE_SOON_DAYS,
        "due_date": due_date,
        "days_remaining": days_remaining,
        "days_overdue": -delta if is_expired else 0,
    }


# ============================================================================
# LES TROIS ÉCHÉANCES
# ============================================================================

def evaluate_validity(equipment, material, now) -> TrackStatus:
    commissioning = to_local_date(equipment.commissioning_date)
    due = commissioning + timedelta(days=material.validity_time)
    return TrackStatus(**_track(due, to_local_date(now)))


def evaluate_control(equipment, material, now) -> ControlStatus:
    last = equipment.last_verification_date
    base = to_local_date(last) if last else to_local_date(equipment.commissioning_date)
    due = base + timedelta(days=material.time_before_control)
    return ControlStatus(
        **_track(due, to_local_date(now)),
        has_never_been_controlled=last is None,
    )


def recharge_applies(material) -> bool:
    return _material_type(material) == RECHARGEABLE_TYPE and bool(material.time_before_reload)


def evaluate_recharge(equipment, material, now) -> Union[RechargeStatus, NotApplicable]:
    if not recharge_applies(material):
        return NOT_APPLICABLE

    last = equipment.last_recharge_date
    base = to_local_date(last) if last else to_local_date(equipment.commissioning_date)
    due = base + timedelta(days=material.time_before_reload)
    return RechargeStatus(
        **_track(due, to_local_date(now)),
        has_never_been_recharged=last is None,
    )


# ============================================================================
# CLASSIFICATION
# ============================================================================

def classify(
    validity: TrackStatus,
    control: ControlStatus,
    recharge: Union[RechargeStatus, NotApplicable],
) -> Tuple[Severity, str]:
    """
    Niveau de gravité global. La validité prime toujours sur le contrôle et
    la recharge, quel que soit le nombre de jours de retard.
    """
    rch = recharge if recharge.applicable else None

    if validity.is_expired:
        return Severity.CRITICAL, "validity-expired"
    if control.is_expired:
        return Severity.IMPORTANT, "control-expired"
    if rch and rch.is_expired:
        return Severity.IMPORTANT, "recharge-expired"
    if validity.is_due_soon:
        return Severity.MODERATE, "validity-soon"
    if control.is_due_soon:
        return Severity.ATTENTION, "control-soon"
    if rch and rch.is_due_soon:
        return Severity.ATTENTION, "recharge-soon"
    return Severity.NORMAL, "valid"


def evaluate(equipment, material=None, now=None) -> EquipmentEvaluation:
    """
    Statut complet d'un équipement à la date ``now``.

    ``material`` vaut par défaut ``equipment.material``. ``now`` est
    obligatoire : aucune lecture implicite de l'horloge.
    """
    if now is None:
        raise TypeError("evaluate() requiert une date de référence 'now'")
    if material is None:
        material = equipment.material

    validity = evaluate_validity(equipment, material, now)
    control = evaluate_control(equipment, material, now)
    recharge = evaluate_recharge(equipment, material, now)
    severity, status_type = classify(validity, control, recharge)

    issues = [validity.is_expired, control.is_expired, recharge.applicable and recharge.is_expired]
    issue_count = sum(1 for i in issues if i)

    return EquipmentEvaluation(
        validity=validity,
        control=control,
        recharge=recharge,
        severity=severity,
        status_type=status_type,
        issue_count=issue_count,
        has_any_issue=issue_count > 0,
    )


def needing_attention(equipments: Iterable, now) -> List:
    """Équipements ayant au moins une échéance dépassée."""
    return [e for e in equipments if evaluate(e, now=now).has_any_issue]


def most_severe(evaluations: Iterable[EquipmentEvaluation]) -> Optional[Severity]:
    ranked = sorted((e.severity for e in evaluations), key=lambda s: s.rank)
    return ranked[0] if ranked else None


def issue_summary(evaluations: Iterable[EquipmentEvaluation]) -> dict:
    """Compteurs d'échéances dépassées, par type, pour un parc."""
    evaluations = list(evaluations)
    return {
        "total": len(evaluations),
        "validity_expired": sum(1 for e in evaluations if e.validity.is_expired),
        "control_expired": sum(1 for e in evaluations if e.control.is_expired),
        "recharge_expired": sum(1 for e in evaluations if e.recharge.applicable and e.recharge.is_expired),
    }
