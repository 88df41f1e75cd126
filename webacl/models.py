from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from aws_cdk import aws_wafv2 as wafv2

from webacl.errors import UnsupportedRulesValueError


class Scope(str, Enum):
    """Available resource associations."""

    # CloudFront distributions, the Web ACL has to be deployed in us-east-1
    CLOUDFRONT = "CLOUDFRONT"
    # ALB, API Gateway REST API, AppSync GraphQL API, ...
    REGIONAL = "REGIONAL"


class IpAddressVersion(str, Enum):
    IPV4 = "IPV4"
    IPV6 = "IPV6"


class RuleId(str, Enum):
    """Opinionated rules a WebAcl can enable, each at most once."""

    IP_BLOCK = "ip-block"
    RATE_LIMIT = "rate-limit"
    IP_REPUTATION = "ip-reputation"
    MANAGED_CORE = "managed-core"
    BAD_INPUTS = "bad-inputs"


@dataclass(frozen=True)
class ManagedRuleGroup:
    rule_id: RuleId
    priority: int
    group_name: str
    vendor_name: str = "AWS"


MANAGED_RULE_GROUPS: Dict[RuleId, ManagedRuleGroup] = {
    RuleId.IP_REPUTATION: ManagedRuleGroup(
        RuleId.IP_REPUTATION, 30, "AWSManagedRulesAmazonIpReputationList"
    ),
    RuleId.MANAGED_CORE: ManagedRuleGroup(
        RuleId.MANAGED_CORE, 40, "AWSManagedRulesCommonRuleSet"
    ),
    RuleId.BAD_INPUTS: ManagedRuleGroup(
        RuleId.BAD_INPUTS, 50, "AWSManagedRulesKnownBadInputsRuleSet"
    ),
}


class RulesValue(ABC):
    """State of the ``rules`` property of the underlying CfnWebACL.

    The property is either unset, a plain list of rules, or something the
    caller handed in that we cannot look inside of (a token).
    """

    @abstractmethod
    def normalize(self) -> List[Any]:
        """Return the rules as a new list ready to be appended to."""


@dataclass
class EmptyRules(RulesValue):
    def normalize(self) -> List[Any]:
        return []


@dataclass
class RuleList(RulesValue):
    items: List[Any] = field(default_factory=list)

    def normalize(self) -> List[Any]:
        return list(self.items)


@dataclass
class OpaqueRules(RulesValue):
    value: Any = None

    def normalize(self) -> List[Any]:
        # An IResolvable may itself resolve to a list, wrapping it would nest lists
        raise UnsupportedRulesValueError()


def rules_value_of(value: Any) -> RulesValue:
    if value is None:
        return EmptyRules()
    if isinstance(value, (list, tuple)):
        return RuleList(list(value))
    # a single rule passed without a surrounding list
    if isinstance(value, (dict, wafv2.CfnWebACL.RuleProperty)):
        return RuleList([value])
    return OpaqueRules(value)
