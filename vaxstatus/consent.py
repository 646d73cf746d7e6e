"""
Consent aggregation: reconcile every reply for a patient session into one
ConsentOutcome.

Invalid replies never count. Undelivered requests only matter when nothing was
delivered at all. When delivered replies disagree, a self-consenting child's
decision wins over parents, then a confirmed refusal stays final, a request to
discuss wins over calling the replies conflicting, and anything else is
surfaced as Inconsistent.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from .enums import (
    CONSENT_GIVEN_OUTCOMES,
    CONSENT_REFUSED_OUTCOMES,
    GIVEN_DECISIONS,
    ConsentOutcome,
    EmailStatus,
    ReplyDecision,
    ReplyMethod,
    ReplyRefusal,
    SmsStatus,
)
from .repository import Repository
from .resolver import Resolution, Rule, always, first_match
from .schema import PatientSession, Reply


SELF_CONSENT_RELATIONSHIP = "Child (Gillick competent)"
ALL_RESPONDENTS = "All"


def is_delivered(reply: Reply) -> bool:
    # Only requests sent online can fail to arrive
    if reply.method != ReplyMethod.WEBSITE:
        return True
    parent = reply.parent
    if parent is None:
        return True
    got_email = bool(parent.email) and parent.email_status == EmailStatus.DELIVERED
    got_sms = parent.sms and parent.sms_status == SmsStatus.DELIVERED
    return got_email or got_sms


def is_given(reply: Reply) -> bool:
    return reply.decision in GIVEN_DECISIONS


def is_self_consent(reply: Reply) -> bool:
    return reply.self_consent or reply.parent is None


def relationship(reply: Reply) -> str:
    if is_self_consent(reply):
        return SELF_CONSENT_RELATIONSHIP
    return reply.parent.relationship.value


def has_consent_for_alternative(reply: Reply) -> bool:
    return reply.decision == ReplyDecision.ONLY_ALTERNATIVE or (is_given(reply) and reply.alternative)


def valid_replies(repo: Repository, ps: PatientSession) -> List[Reply]:
    return [reply for reply in repo.replies_for(ps) if not reply.invalid]


def responses(repo: Repository, ps: PatientSession) -> List[Reply]:
    """Valid replies whose consent request was delivered."""
    return [reply for reply in valid_replies(repo, ps) if is_delivered(reply)]


# -----------------------
# Single decision → outcome
# -----------------------

@dataclass(frozen=True)
class DecisionFacts:
    decision: ReplyDecision
    confirmed: bool
    offers_alternative: bool


DECISION_RULES: List[Rule[DecisionFacts, ConsentOutcome]] = [
    Rule("DEC-01", lambda f: f.decision == ReplyDecision.NO_RESPONSE, lambda f: ConsentOutcome.NO_RESPONSE),
    Rule(
        "DEC-02",
        lambda f: f.decision == ReplyDecision.REFUSED and f.confirmed,
        lambda f: ConsentOutcome.FINAL_REFUSAL,
    ),
    Rule(
        "DEC-03",
        lambda f: f.decision == ReplyDecision.ONLY_ALTERNATIVE and f.offers_alternative,
        lambda f: ConsentOutcome.GIVEN_FOR_ALTERNATIVE,
    ),
    Rule("DEC-04", lambda f: f.decision in GIVEN_DECISIONS, lambda f: ConsentOutcome.GIVEN),
    Rule("DEC-05", lambda f: f.decision == ReplyDecision.DECLINED, lambda f: ConsentOutcome.DECLINED),
    Rule("DEC-06", lambda f: f.decision == ReplyDecision.REFUSED, lambda f: ConsentOutcome.REFUSED),
]


def decision_outcome(replies: List[Reply], offers_alternative: bool) -> ConsentOutcome:
    """Outcome for one or more replies sharing the same decision."""
    facts = DecisionFacts(
        decision=replies[-1].decision,
        confirmed=any(reply.confirmed for reply in replies),
        offers_alternative=offers_alternative,
    )
    return first_match("consent_decision", DECISION_RULES, facts).value


# -----------------------
# Aggregation
# -----------------------

@dataclass(frozen=True)
class ConsentFacts:
    replies: Tuple[Reply, ...]
    delivered: Tuple[Reply, ...]
    offers_alternative: bool

    @property
    def decisions(self) -> set:
        return {reply.decision for reply in self.delivered}

    @property
    def conflicting(self) -> bool:
        return len(self.decisions) > 1

    @property
    def child_reply(self) -> Optional[Reply]:
        children = [reply for reply in self.delivered if is_self_consent(reply)]
        return children[-1] if children else None

    @property
    def confirmed_refusal(self) -> bool:
        return any(reply.decision == ReplyDecision.REFUSED and reply.confirmed for reply in self.delivered)


CONSENT_RULES: List[Rule[ConsentFacts, ConsentOutcome]] = [
    Rule("CON-01", lambda f: not f.replies, lambda f: ConsentOutcome.NO_RESPONSE),
    Rule(
        "CON-02",
        lambda f: len(f.replies) == 1 and not f.delivered,
        lambda f: ConsentOutcome.NO_REQUEST,
    ),
    Rule(
        "CON-03",
        lambda f: len(f.replies) == 1,
        lambda f: decision_outcome(list(f.delivered), f.offers_alternative),
    ),
    Rule("CON-04", lambda f: not f.delivered, lambda f: ConsentOutcome.NO_REQUEST),
    Rule(
        "CON-05",
        lambda f: not f.conflicting,
        lambda f: decision_outcome(list(f.delivered), f.offers_alternative),
    ),
    Rule(
        "CON-06",
        lambda f: f.child_reply is not None,
        lambda f: decision_outcome([f.child_reply], f.offers_alternative),
    ),
    # A confirmed refusal outranks any other parental reply
    Rule("CON-07", lambda f: f.confirmed_refusal, lambda f: ConsentOutcome.FINAL_REFUSAL),
    Rule(
        "CON-08",
        lambda f: ReplyDecision.DECLINED in f.decisions,
        lambda f: ConsentOutcome.DECLINED,
    ),
    Rule("CON-09", always, lambda f: ConsentOutcome.INCONSISTENT),
]


def resolve_consent(repo: Repository, ps: PatientSession) -> Resolution[ConsentOutcome]:
    replies = valid_replies(repo, ps)
    programme = repo.get_programme(ps.programme_id)
    facts = ConsentFacts(
        replies=tuple(replies),
        delivered=tuple(reply for reply in replies if is_delivered(reply)),
        offers_alternative=repo.offers_alternative(programme),
    )
    return first_match("consent", CONSENT_RULES, facts)


def get_consent_outcome(repo: Repository, patient_session_id: str) -> ConsentOutcome:
    ps = repo.lookup_patient_session(patient_session_id)
    if ps is None:
        return ConsentOutcome.NO_RESPONSE
    return resolve_consent(repo, ps).value


def consent_given(outcome: ConsentOutcome) -> bool:
    return outcome in CONSENT_GIVEN_OUTCOMES


def consent_refused(outcome: ConsentOutcome) -> bool:
    return outcome in CONSENT_REFUSED_OUTCOMES


def did_not_consent(outcome: ConsentOutcome) -> bool:
    return outcome in CONSENT_REFUSED_OUTCOMES or outcome == ConsentOutcome.INCONSISTENT


# -----------------------
# Reply summaries
# -----------------------

def parental_relationships(repo: Repository, ps: PatientSession) -> List[str]:
    return [relationship(reply) for reply in responses(repo, ps)]


def parents_requesting_follow_up(repo: Repository, ps: PatientSession) -> List[str]:
    return [
        f"{reply.parent.full_name} ({reply.parent.relationship.value})"
        for reply in responses(repo, ps)
        if reply.decision == ReplyDecision.DECLINED and reply.parent is not None
    ]


class RefusalReason(BaseModel):
    reason: ReplyRefusal
    confirmed: bool = False

    model_config = {"extra": "forbid", "frozen": True}


def consent_refusal_reasons(repo: Repository, ps: PatientSession) -> List[RefusalReason]:
    reasons: List[RefusalReason] = []
    for reply in valid_replies(repo, ps):
        if reply.refusal_reason is None:
            continue
        reason = RefusalReason(reason=reply.refusal_reason, confirmed=reply.confirmed)
        if reason not in reasons:
            reasons.append(reason)
    return reasons


class CombinedHealthAnswer(BaseModel):
    answer: str
    details: Optional[str] = None
    relationship: str

    model_config = {"extra": "forbid", "frozen": True}


def consent_health_answers(repo: Repository, ps: PatientSession) -> Optional[Dict[str, List[CombinedHealthAnswer]]]:
    """Answers to each health question across every response that has them.

    A single responder's answers are listed as given. With several responders,
    identical answers collapse into one entry attributed to all of them, while
    answers carrying details or differing between responders are listed per
    responder.
    """
    answered = [reply for reply in responses(repo, ps) if is_given(reply) and reply.health_answers]
    if not answered:
        return None

    combined: Dict[str, List[CombinedHealthAnswer]] = {}
    single = len(answered) == 1
    for reply in answered:
        for key, health_answer in reply.health_answers.items():
            entries = combined.setdefault(key, [])
            others = [other.health_answers.get(key) for other in answered]
            same_answers = all(other is not None and other.answer == health_answer.answer for other in others)
            same_with_details = any(
                other is not None and other.details and other.answer == health_answer.answer for other in others
            )
            entry = CombinedHealthAnswer(
                answer=health_answer.answer,
                details=health_answer.details,
                relationship=relationship(reply),
            )
            if single or same_with_details:
                entries.append(entry)
            elif same_answers:
                if not entries:
                    entries.append(entry.model_copy(update={"relationship": ALL_RESPONDENTS}))
            else:
                entries.append(entry)
    return combined
