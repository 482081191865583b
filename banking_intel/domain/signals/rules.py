"""Backend rule synthesis - trigger candidates derived from other signals"""

from typing import List, Sequence

from banking_intel.domain.keywords import REWARD_RULE_MIN_COUNT, REWARD_RULES, matches_any
from banking_intel.domain.models import BackendRule, RiskAssessment, RuleSet
from banking_intel.domain.signals.categories import CategoryGroup
from banking_intel.domain.signals.risk import LIQUIDITY

LIQUIDITY_GUARDRAIL = BackendRule(
    key="liquidity_guardrail",
    condition="end_balance < 1.5 * avg_daily_spend",
    actions=("enable_overdraft_grace", "offer_loc_1500"),
    label="Liquidity guardrail (overdraft grace + LOC) — prevents attrition.",
)

GAMBLING_CAP = BackendRule(
    key="gambling_cap",
    condition="gambling_ratio > 0.15",
    actions=("set_betting_cap", "alerts@[50,75,100]"),
    label="Gambling cap & alerts — risk mitigation and wellness.",
)


def synthesize_rules(risk: RiskAssessment, categories: Sequence[CategoryGroup]) -> RuleSet:
    """
    Propose trigger rules in a fixed generation order:
    liquidity guardrail, category rewards (coffee, transit), gambling cap.

    The priority stack follows generation order, numbered from 1.
    """
    rules: List[BackendRule] = []

    if risk.has_risk(LIQUIDITY):
        rules.append(LIQUIDITY_GUARDRAIL)

    for template in REWARD_RULES:
        match = next((c for c in categories if matches_any(c.name, template.category_keywords)), None)
        if match is not None and match.count >= REWARD_RULE_MIN_COUNT:
            rules.append(
                BackendRule(
                    key=template.key,
                    condition=template.condition,
                    actions=template.actions,
                    label=template.label,
                )
            )

    if risk.gambling_transaction_count > 0:
        rules.append(GAMBLING_CAP)

    priority_stack = tuple(f"{i}) {rule.label}" for i, rule in enumerate(rules, start=1))
    return RuleSet(rules=tuple(rules), priority_stack=priority_stack)
