import pytest

from vaxstatus.config import get_settings
from vaxstatus.enums import (
    InstructionOutcome,
    RecordVaccineCriteria,
    ReplyDecision,
    ScreenOutcome,
    VaccineMethod,
)
from vaxstatus.errors import MissingRelationError
from vaxstatus.schema import PatientSession
from vaxstatus.vaccine_method import (
    can_record_alternative_vaccine,
    get_instruction_outcome,
    get_vaccine_selection,
    resolve_instruction,
    resolve_vaccine,
    resolve_vaccine_criteria,
    vaccine_facts,
)

from builders import build_repo, reply, the_ps, triage_note


def selection_of(replies=(), events=(), **kwargs):
    repo = build_repo(replies, events, **kwargs)
    facts = vaccine_facts(repo, the_ps(repo))
    return resolve_vaccine(facts), resolve_vaccine_criteria(facts)


def test_no_vaccine_without_consent():
    vaccine, criteria = selection_of([reply(ReplyDecision.REFUSED)])
    assert vaccine.value is None
    assert criteria.value is None


def test_standard_vaccine_by_default():
    vaccine, criteria = selection_of([reply(ReplyDecision.GIVEN, alternative=True)])
    assert vaccine.value.id == "flu-standard"
    assert vaccine.rule_id == "VAC-07"
    assert criteria.value == RecordVaccineCriteria.ANY


def test_single_vaccine_programme():
    vaccine, criteria = selection_of([reply()], alternative=False)
    assert vaccine.value.id == "flu-standard"
    assert vaccine.rule_id == "VAC-02"
    assert criteria.value is None


def test_alternative_only_consent_selects_alternative():
    vaccine, criteria = selection_of([reply(ReplyDecision.ONLY_ALTERNATIVE)])
    assert vaccine.value.id == "flu-alternative"
    assert criteria.value == RecordVaccineCriteria.ALTERNATIVE_ONLY


def test_screening_decision_overrides_consented_method():
    vaccine, criteria = selection_of(
        [reply(ReplyDecision.ONLY_ALTERNATIVE)],
        [triage_note(ScreenOutcome.VACCINATE_STANDARD, 5)],
    )
    assert vaccine.value.id == "flu-standard"
    assert vaccine.rule_id == "VAC-04"
    assert criteria.value == RecordVaccineCriteria.STANDARD_ONLY

    vaccine, criteria = selection_of(
        [reply(ReplyDecision.GIVEN, alternative=True)],
        [triage_note(ScreenOutcome.VACCINATE_ALTERNATIVE, 5)],
    )
    assert vaccine.value.id == "flu-alternative"
    assert criteria.value == RecordVaccineCriteria.ALTERNATIVE_ONLY


def test_administered_alternative_is_reported():
    ps = PatientSession(id="ps-1", patient_id="p-1", programme_id="flu", session_id="s-1", alternative=True)
    vaccine, _ = selection_of([reply()], patient_session=ps)
    assert vaccine.value.id == "flu-alternative"
    assert vaccine.rule_id == "VAC-05"


def test_nasal_vaccine_needs_instruction():
    repo = build_repo([reply()])
    assert get_instruction_outcome(repo, "ps-1") == InstructionOutcome.NEEDED

    ps = the_ps(repo).model_copy(update={"instruction_id": "psd-1"})
    standard = repo.vaccines["flu-standard"]
    assert resolve_instruction(ps, standard).value == InstructionOutcome.GIVEN


def test_injected_vaccine_needs_no_instruction():
    repo = build_repo([reply()], standard_method=VaccineMethod.INJECTION)
    assert get_instruction_outcome(repo, "ps-1") is None
    assert resolve_instruction(the_ps(repo), None).rule_id == "INS-01"


def test_can_record_alternative_vaccine():
    repo = build_repo([reply(alternative=True)])
    ps = the_ps(repo)
    assert can_record_alternative_vaccine(repo, ps)
    assert not can_record_alternative_vaccine(repo, ps, ScreenOutcome.VACCINATE_STANDARD)

    repo = build_repo([reply(ReplyDecision.ONLY_ALTERNATIVE)])
    assert not can_record_alternative_vaccine(repo, the_ps(repo))


def test_vaccine_selection():
    selection = get_vaccine_selection(build_repo([reply(ReplyDecision.ONLY_ALTERNATIVE)]), "ps-1")
    assert selection.vaccine_id == "flu-alternative"
    assert selection.method == VaccineMethod.INJECTION
    assert selection.alternative
    assert get_vaccine_selection(build_repo(), "ps-1") is None
    assert get_vaccine_selection(build_repo(), "missing") is None


def test_unknown_patient_session_raises_in_strict_mode(monkeypatch):
    monkeypatch.setenv("VAXSTATUS_STRICT", "true")
    get_settings.cache_clear()
    with pytest.raises(MissingRelationError):
        get_vaccine_selection(build_repo(), "missing")
    with pytest.raises(MissingRelationError):
        get_instruction_outcome(build_repo(), "missing")
