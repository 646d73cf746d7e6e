"""
Vaccine selection for programmes offering an alternative vaccine, and the
patient-specific direction (PSD) needed before a nasal vaccine is given.

Consulted before a vaccination is recorded and again when reporting, since a
triage decision made after consent can change which vaccine applies.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel

from .consent import consent_given, has_consent_for_alternative, resolve_consent, responses
from .enums import (
    ConsentOutcome,
    InstructionOutcome,
    RecordVaccineCriteria,
    ReplyDecision,
    ScreenOutcome,
    VaccineMethod,
)
from .repository import Repository
from .resolver import Resolution, Rule, always, first_match
from .schema import PatientSession, Vaccine
from .triage import resolve_screen


@dataclass(frozen=True)
class VaccineFacts:
    consent: ConsentOutcome
    screen: Optional[ScreenOutcome]
    standard: Optional[Vaccine]
    alternative: Optional[Vaccine]
    administered_alternative: bool
    alternative_only: bool

    @property
    def consent_given(self) -> bool:
        return consent_given(self.consent)

    @property
    def offers_alternative(self) -> bool:
        return self.alternative is not None


VACCINE_RULES: List[Rule[VaccineFacts, Optional[Vaccine]]] = [
    Rule("VAC-01", lambda f: not f.consent_given, lambda f: None),
    Rule("VAC-02", lambda f: not f.offers_alternative, lambda f: f.standard),
    Rule("VAC-03", lambda f: f.screen == ScreenOutcome.VACCINATE_ALTERNATIVE, lambda f: f.alternative),
    Rule("VAC-04", lambda f: f.screen == ScreenOutcome.VACCINATE_STANDARD, lambda f: f.standard),
    Rule("VAC-05", lambda f: f.administered_alternative, lambda f: f.alternative),
    Rule("VAC-06", lambda f: f.alternative_only, lambda f: f.alternative),
    Rule("VAC-07", always, lambda f: f.standard),
]

CRITERIA_RULES: List[Rule[VaccineFacts, Optional[RecordVaccineCriteria]]] = [
    Rule("CRI-01", lambda f: not f.offers_alternative, lambda f: None),
    Rule("CRI-02", lambda f: not f.consent_given, lambda f: None),
    Rule(
        "CRI-03",
        lambda f: f.screen == ScreenOutcome.VACCINATE_STANDARD,
        lambda f: RecordVaccineCriteria.STANDARD_ONLY,
    ),
    Rule(
        "CRI-04",
        lambda f: f.consent == ConsentOutcome.GIVEN_FOR_ALTERNATIVE
        or f.screen == ScreenOutcome.VACCINATE_ALTERNATIVE,
        lambda f: RecordVaccineCriteria.ALTERNATIVE_ONLY,
    ),
    Rule("CRI-05", always, lambda f: RecordVaccineCriteria.ANY),
]


@dataclass(frozen=True)
class InstructionFacts:
    vaccine: Optional[Vaccine]
    instructed: bool


INSTRUCTION_RULES: List[Rule[InstructionFacts, Optional[InstructionOutcome]]] = [
    Rule("INS-01", lambda f: f.vaccine is None, lambda f: None),
    Rule(
        "INS-02",
        lambda f: f.vaccine.method == VaccineMethod.INTRANASAL and f.instructed,
        lambda f: InstructionOutcome.GIVEN,
    ),
    Rule(
        "INS-03",
        lambda f: f.vaccine.method == VaccineMethod.INTRANASAL,
        lambda f: InstructionOutcome.NEEDED,
    ),
    Rule("INS-04", always, lambda f: None),
]


def vaccine_facts(
    repo: Repository,
    ps: PatientSession,
    consent: Optional[ConsentOutcome] = None,
    screen: Optional[ScreenOutcome] = None,
    screen_known: bool = False,
) -> VaccineFacts:
    if consent is None:
        consent = resolve_consent(repo, ps).value
    if not screen_known:
        screen = resolve_screen(repo, ps, consent).value
    programme = repo.get_programme(ps.programme_id)
    replies = responses(repo, ps)
    return VaccineFacts(
        consent=consent,
        screen=screen,
        standard=repo.standard_vaccine(programme),
        alternative=repo.alternative_vaccine(programme),
        administered_alternative=ps.alternative,
        alternative_only=bool(replies) and all(reply.decision == ReplyDecision.ONLY_ALTERNATIVE for reply in replies),
    )


def resolve_vaccine(facts: VaccineFacts) -> Resolution[Optional[Vaccine]]:
    return first_match("vaccine", VACCINE_RULES, facts)


def resolve_vaccine_criteria(facts: VaccineFacts) -> Resolution[Optional[RecordVaccineCriteria]]:
    return first_match("vaccine_criteria", CRITERIA_RULES, facts)


def resolve_instruction(ps: PatientSession, vaccine: Optional[Vaccine]) -> Resolution[Optional[InstructionOutcome]]:
    facts = InstructionFacts(vaccine=vaccine, instructed=ps.instruction_id is not None)
    return first_match("instruction", INSTRUCTION_RULES, facts)


def can_record_alternative_vaccine(repo: Repository, ps: PatientSession, screen: Optional[ScreenOutcome] = None) -> bool:
    """Whether the clinician may still choose between the two vaccines when recording."""
    replies = responses(repo, ps)
    return (
        all(has_consent_for_alternative(reply) for reply in replies)
        and not all(reply.decision == ReplyDecision.ONLY_ALTERNATIVE for reply in replies)
        and screen != ScreenOutcome.VACCINATE_STANDARD
    )


class VaccineSelection(BaseModel):
    vaccine_id: str
    method: VaccineMethod
    alternative: bool
    criteria: Optional[RecordVaccineCriteria] = None

    model_config = {"extra": "forbid", "frozen": True}


def get_vaccine_selection(repo: Repository, patient_session_id: str) -> Optional[VaccineSelection]:
    ps = repo.lookup_patient_session(patient_session_id)
    if ps is None:
        return None
    facts = vaccine_facts(repo, ps)
    vaccine = resolve_vaccine(facts).value
    if vaccine is None:
        return None
    return VaccineSelection(
        vaccine_id=vaccine.id,
        method=vaccine.method,
        alternative=vaccine.alternative,
        criteria=resolve_vaccine_criteria(facts).value,
    )


def get_instruction_outcome(repo: Repository, patient_session_id: str) -> Optional[InstructionOutcome]:
    ps = repo.lookup_patient_session(patient_session_id)
    if ps is None:
        return None
    vaccine = resolve_vaccine(vaccine_facts(repo, ps)).value
    return resolve_instruction(ps, vaccine).value
