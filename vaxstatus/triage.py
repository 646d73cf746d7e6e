from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .consent import consent_given, has_consent_for_alternative, is_given, resolve_consent, responses
from .enums import ConsentOutcome, ReplyDecision, ScreenOutcome, ScreenVaccineCriteria, TriageOutcome
from .repository import Repository
from .resolver import Resolution, Rule, always, first_match
from .schema import HealthAnswer, PatientSession, Reply


# Only the sub-questions of the asthma question get triaged
UMBRELLA_QUESTIONS = frozenset({"asthma"})


def has_answers_needing_triage(health_answers: Optional[Dict[str, HealthAnswer]]) -> bool:
    if not health_answers:
        return False
    return any(
        answer.answer == "Yes"
        for key, answer in health_answers.items()
        if key not in UMBRELLA_QUESTIONS
    )


def responses_to_triage(repo: Repository, ps: PatientSession) -> List[Reply]:
    return [
        reply
        for reply in responses(repo, ps)
        if is_given(reply) and has_answers_needing_triage(reply.health_answers)
    ]


@dataclass(frozen=True)
class ScreenFacts:
    consent_given: bool
    needs_triage: bool
    last_outcome: Optional[ScreenOutcome]


SCREEN_RULES: List[Rule[ScreenFacts, Optional[ScreenOutcome]]] = [
    Rule("SCR-01", lambda f: not f.consent_given, lambda f: None),
    Rule("SCR-02", lambda f: not f.needs_triage and f.last_outcome is not None, lambda f: f.last_outcome),
    Rule("SCR-03", lambda f: not f.needs_triage, lambda f: None),
    Rule("SCR-04", lambda f: f.last_outcome is not None, lambda f: f.last_outcome),
    Rule("SCR-05", always, lambda f: ScreenOutcome.NEEDS_TRIAGE),
]

TRIAGE_RULES: List[Rule[Optional[ScreenOutcome], TriageOutcome]] = [
    Rule("TRI-01", lambda screen: screen == ScreenOutcome.NEEDS_TRIAGE, lambda screen: TriageOutcome.NEEDED),
    Rule("TRI-02", lambda screen: screen is not None, lambda screen: TriageOutcome.COMPLETED),
    Rule("TRI-03", always, lambda screen: TriageOutcome.NOT_NEEDED),
]


def resolve_screen(
    repo: Repository, ps: PatientSession, consent: Optional[ConsentOutcome] = None
) -> Resolution[Optional[ScreenOutcome]]:
    """Screening outcome: None when consent is missing or no screening was necessary."""
    if consent is None:
        consent = resolve_consent(repo, ps).value
    notes = repo.triage_notes(ps)
    facts = ScreenFacts(
        consent_given=consent_given(consent),
        needs_triage=bool(responses_to_triage(repo, ps)),
        # The latest decision supersedes earlier ones
        last_outcome=notes[-1].outcome if notes else None,
    )
    return first_match("screen", SCREEN_RULES, facts)


def resolve_triage(screen: Optional[ScreenOutcome]) -> Resolution[TriageOutcome]:
    return first_match("triage", TRIAGE_RULES, screen)


def get_screen_outcome(repo: Repository, patient_session_id: str) -> Optional[ScreenOutcome]:
    ps = repo.lookup_patient_session(patient_session_id)
    if ps is None:
        return None
    return resolve_screen(repo, ps).value


def get_triage_outcome(repo: Repository, patient_session_id: str) -> TriageOutcome:
    return resolve_triage(get_screen_outcome(repo, patient_session_id)).value


def screen_outcomes_for_consent_method(repo: Repository, ps: PatientSession) -> List[ScreenOutcome]:
    """Triage decisions a clinician may choose from, given what was consented to."""
    replies = responses(repo, ps)
    programme = repo.get_programme(ps.programme_id)
    consent_for_alternative = all(has_consent_for_alternative(reply) for reply in replies)
    alternative_only = all(reply.decision == ReplyDecision.ONLY_ALTERNATIVE for reply in replies)

    options: List[ScreenOutcome] = []
    if not repo.offers_alternative(programme):
        options.append(ScreenOutcome.VACCINATE)
    else:
        if not alternative_only:
            options.append(ScreenOutcome.VACCINATE_STANDARD)
        if consent_for_alternative:
            options.append(ScreenOutcome.VACCINATE_ALTERNATIVE)
    options.extend([
        ScreenOutcome.NEEDS_TRIAGE,
        ScreenOutcome.DELAY_VACCINATION,
        ScreenOutcome.DO_NOT_VACCINATE,
    ])
    return options


def screen_vaccine_criteria(repo: Repository, ps: PatientSession) -> Optional[ScreenVaccineCriteria]:
    programme = repo.get_programme(ps.programme_id)
    if not repo.offers_alternative(programme):
        return None
    replies = responses(repo, ps)
    if all(reply.decision == ReplyDecision.ONLY_ALTERNATIVE for reply in replies):
        return ScreenVaccineCriteria.ALTERNATIVE_ONLY
    if not all(has_consent_for_alternative(reply) for reply in replies):
        return ScreenVaccineCriteria.STANDARD_ONLY
    return ScreenVaccineCriteria.EITHER
