"""
Risk category domain model.

Maps gestational age and the neurotoxicity-risk flag onto the AAP 2004 risk
tiers used to pick a column from the treatment curves.
"""

import typing
from enum import Enum

from .gestation import GestationalAge


class RiskTag(Enum):
    """
    Curve column selector.
    NA means no column can be chosen yet.
    """
    LOW = "LOW"
    MED = "MED"
    HIGH = "HIGH"
    NA = "NA"

    @classmethod
    def from_label(cls, label: str) -> "RiskTag":
        """
        Convert a tag string ("low", "MED", "medium", ...) into the enum.
        """
        key = label.strip().upper()
        aliases = {"MEDIUM": "MED", "N/A": "NA"}
        try:
            return cls(aliases.get(key, key))
        except ValueError:
            raise ValueError(f"Unknown risk tag label: {label!r}")


class RiskCategory(Enum):
    """
    Risk categories, each carrying its curve tag and display label.
    Two categories share the HIGH tag; only the tag drives the curves.
    """
    PENDING_INPUT = (RiskTag.NA, "Pending Input")
    CONSULT_NICU = (RiskTag.HIGH, "< 35 Weeks (Consult NICU)")
    LOW = (RiskTag.LOW, "Low Risk Neonate")
    MEDIUM = (RiskTag.MED, "Medium Risk Neonate")
    HIGH = (RiskTag.HIGH, "High Risk Neonate")

    def __init__(self, tag: RiskTag, label: str):
        self.tag = tag
        self.label = label


def classify_total_weeks(total: float, has_neurotoxicity_risk: bool) -> RiskCategory:
    # first match wins
    if 0 < total < 35:
        return RiskCategory.CONSULT_NICU
    if total >= 38 and not has_neurotoxicity_risk:
        return RiskCategory.LOW
    if (total >= 38 and has_neurotoxicity_risk) or (35 <= total < 38 and not has_neurotoxicity_risk):
        return RiskCategory.MEDIUM
    return RiskCategory.HIGH


def classify_gestational_age(
    gestation: typing.Optional[GestationalAge], has_neurotoxicity_risk: bool
) -> RiskCategory:
    if gestation is None:
        return RiskCategory.PENDING_INPUT
    return classify_total_weeks(gestation.total_weeks, has_neurotoxicity_risk)


def classify_risk(weeks: typing.Any, days: typing.Any, has_neurotoxicity_risk: bool) -> RiskCategory:
    """
    Classify a neonate from raw gestation inputs.

    Both weeks and days empty -> PENDING_INPUT. Otherwise the parsed values
    (unparseable parts count as 0) are combined into total weeks.
    """
    return classify_gestational_age(
        GestationalAge.from_inputs(weeks, days), bool(has_neurotoxicity_risk)
    )
