from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar


logger = logging.getLogger(__name__)

C = TypeVar("C")
V = TypeVar("V")


@dataclass(frozen=True)
class Rule(Generic[C, V]):
    rule_id: str
    when: Callable[[C], bool]
    then: Callable[[C], V]


@dataclass(frozen=True)
class Resolution(Generic[V]):
    value: V
    rule_id: str


def first_match(
    resolver: str,
    rules: Sequence[Rule[C, V]],
    facts: C,
    default: Optional[Callable[[C], V]] = None,
    default_id: str = "default",
) -> Resolution[V]:
    """Evaluate rules in order; the first rule whose condition holds decides."""
    for rule in rules:
        if rule.when(facts):
            value = rule.then(facts)
            logger.debug("%s: %s -> %s", resolver, rule.rule_id, value)
            return Resolution(value=value, rule_id=rule.rule_id)
    if default is None:
        raise ValueError(f"{resolver}: no rule matched and no default given")
    value = default(facts)
    logger.debug("%s: %s -> %s", resolver, default_id, value)
    return Resolution(value=value, rule_id=default_id)


def always(_facts: object) -> bool:
    return True
