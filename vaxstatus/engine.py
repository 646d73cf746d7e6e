"""
Outcome and activity routing for one patient session.

`decide` runs every resolver in dependency order (consent, screening, vaccine
selection, instruction, outcome, registration) over one repository snapshot
and returns all derived statuses with a trace of the rules that fired.
Nothing is cached; calling it twice on the same snapshot gives the same
result.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .consent import consent_given, consent_refused, resolve_consent
from .enums import (
    Activity,
    ConsentOutcome,
    GIVEN_VACCINATION_OUTCOMES,
    ProgrammeOutcome,
    RegistrationOutcome,
    ScreenOutcome,
    TriageOutcome,
    VaccinationOutcome,
)
from .registration import resolve_record, resolve_registration
from .repository import Repository
from .resolver import Resolution, Rule, always, first_match
from .schema import PatientSession, PatientSessionStatus, TraceEntry, Vaccination
from .triage import resolve_screen, resolve_triage
from .vaccine_method import resolve_instruction, resolve_vaccine, resolve_vaccine_criteria, vaccine_facts


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutcomeFacts:
    vaccinations: Tuple[Vaccination, ...]
    consent: ConsentOutcome
    screen: Optional[ScreenOutcome]

    @property
    def last_vaccination(self) -> Optional[Vaccination]:
        return self.vaccinations[-1] if self.vaccinations else None

    @property
    def any_given(self) -> bool:
        return any(v.outcome in GIVEN_VACCINATION_OUTCOMES for v in self.vaccinations)


REPORT_RULES: List[Rule[OutcomeFacts, ProgrammeOutcome]] = [
    # A given vaccination is terminal: later records never undo it
    Rule("RPT-01", lambda f: f.any_given, lambda f: ProgrammeOutcome.VACCINATED),
    Rule("RPT-02", lambda f: f.last_vaccination is not None, lambda f: ProgrammeOutcome.COULD_NOT_VACCINATE),
    Rule("RPT-03", lambda f: consent_refused(f.consent), lambda f: ProgrammeOutcome.COULD_NOT_VACCINATE),
    Rule(
        "RPT-04",
        lambda f: f.screen == ScreenOutcome.DO_NOT_VACCINATE,
        lambda f: ProgrammeOutcome.COULD_NOT_VACCINATE,
    ),
    Rule("RPT-05", always, lambda f: ProgrammeOutcome.NO_OUTCOME_YET),
]

SESSION_OUTCOME_RULES: List[Rule[OutcomeFacts, str]] = [
    Rule("OUT-01", lambda f: f.last_vaccination is not None, lambda f: f.last_vaccination.outcome.value),
    Rule("OUT-02", lambda f: consent_refused(f.consent), lambda f: VaccinationOutcome.REFUSED.value),
    Rule(
        "OUT-03",
        lambda f: f.screen == ScreenOutcome.DO_NOT_VACCINATE,
        lambda f: VaccinationOutcome.CONTRAINDICATIONS.value,
    ),
    Rule("OUT-04", always, lambda f: ProgrammeOutcome.NO_OUTCOME_YET.value),
]


@dataclass(frozen=True)
class ActivityFacts:
    consent: ConsentOutcome
    triage: TriageOutcome
    screen: Optional[ScreenOutcome]
    report: ProgrammeOutcome


ACTIVITY_RULES: List[Rule[ActivityFacts, Activity]] = [
    Rule("ACT-01", lambda f: consent_refused(f.consent), lambda f: Activity.DO_NOT_RECORD),
    Rule("ACT-02", lambda f: not consent_given(f.consent), lambda f: Activity.CONSENT),
    Rule("ACT-03", lambda f: f.triage == TriageOutcome.NEEDED, lambda f: Activity.TRIAGE),
    Rule("ACT-04", lambda f: f.screen == ScreenOutcome.DO_NOT_VACCINATE, lambda f: Activity.DO_NOT_RECORD),
    Rule("ACT-05", lambda f: f.report == ProgrammeOutcome.VACCINATED, lambda f: Activity.REPORT),
    Rule("ACT-06", always, lambda f: Activity.RECORD),
]


def outcome_facts(
    repo: Repository, ps: PatientSession, consent: ConsentOutcome, screen: Optional[ScreenOutcome]
) -> OutcomeFacts:
    return OutcomeFacts(vaccinations=tuple(repo.vaccinations_for(ps)), consent=consent, screen=screen)


def resolve_report(facts: OutcomeFacts) -> Resolution[ProgrammeOutcome]:
    return first_match("report", REPORT_RULES, facts)


def resolve_session_outcome(facts: OutcomeFacts) -> Resolution[str]:
    return first_match("outcome", SESSION_OUTCOME_RULES, facts)


def resolve_next_activity(facts: ActivityFacts) -> Resolution[Activity]:
    return first_match("next_activity", ACTIVITY_RULES, facts)


def decide(repo: Repository, patient_session_id: str) -> Optional[PatientSessionStatus]:
    ps = repo.lookup_patient_session(patient_session_id)
    if ps is None:
        return None

    trace: List[TraceEntry] = []

    def _take(resolver: str, resolution: Resolution):
        trace.append(TraceEntry(resolver=resolver, rule_id=resolution.rule_id))
        return resolution.value

    consent = _take("consent", resolve_consent(repo, ps))
    screen = _take("screen", resolve_screen(repo, ps, consent))
    triage = _take("triage", resolve_triage(screen))

    facts = vaccine_facts(repo, ps, consent=consent, screen=screen, screen_known=True)
    vaccine = _take("vaccine", resolve_vaccine(facts))
    vaccine_criteria = _take("vaccine_criteria", resolve_vaccine_criteria(facts))
    instruct = _take("instruction", resolve_instruction(ps, vaccine))

    outcomes = outcome_facts(repo, ps, consent, screen)
    report = _take("report", resolve_report(outcomes))
    outcome = _take("outcome", resolve_session_outcome(outcomes))
    registration = _take("registration", resolve_registration(repo, ps, report))

    next_activity = _take(
        "next_activity",
        resolve_next_activity(ActivityFacts(consent=consent, triage=triage, screen=screen, report=report)),
    )
    record = _take("record", resolve_record(repo, ps, next_activity, registration))

    logger.debug("decided %s: consent=%s report=%s next=%s", ps.id, consent, report, next_activity)
    return PatientSessionStatus(
        patient_session_id=ps.id,
        patient_id=ps.patient_id,
        programme_id=ps.programme_id,
        session_id=ps.session_id,
        consent=consent,
        screen=screen,
        triage=triage,
        vaccine_id=vaccine.id if vaccine else None,
        vaccine_criteria=vaccine_criteria,
        instruct=instruct,
        registration=registration,
        record=record,
        outcome=outcome,
        report=report,
        next_activity=next_activity,
        trace=trace,
    )


def get_report_outcome(repo: Repository, patient_session_id: str) -> ProgrammeOutcome:
    ps = repo.lookup_patient_session(patient_session_id)
    if ps is None:
        return ProgrammeOutcome.NO_OUTCOME_YET
    consent = resolve_consent(repo, ps).value
    screen = resolve_screen(repo, ps, consent).value
    return resolve_report(outcome_facts(repo, ps, consent, screen)).value


def get_registration_outcome(repo: Repository, patient_session_id: str) -> RegistrationOutcome:
    ps = repo.lookup_patient_session(patient_session_id)
    if ps is None:
        return RegistrationOutcome.PENDING
    report = get_report_outcome(repo, patient_session_id)
    return resolve_registration(repo, ps, report).value


def get_next_activity(repo: Repository, patient_session_id: str) -> Optional[Activity]:
    status = decide(repo, patient_session_id)
    return status.next_activity if status else None


def decide_all(repo: Repository, patient_session_ids: Optional[List[str]] = None) -> List[PatientSessionStatus]:
    ids = patient_session_ids if patient_session_ids is not None else list(repo.patient_sessions)
    statuses = []
    for patient_session_id in ids:
        status = decide(repo, patient_session_id)
        if status is not None:
            statuses.append(status)
    return statuses
