"""WebAcl construct with methods for enabling opinionated rules."""

import logging
import re
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from aws_cdk import aws_wafv2 as wafv2
from constructs import Construct

from webacl.errors import DuplicateRuleEnabledError, UnsupportedRulesValueError
from webacl.models import (
    MANAGED_RULE_GROUPS,
    IpAddressVersion,
    OpaqueRules,
    RuleId,
    RuleList,
    Scope,
    rules_value_of,
)

logger = logging.getLogger(__name__)

Rule = Dict[str, Any]


def _camel_case(key: str) -> str:
    return re.sub(r"_([a-z])", lambda match: match.group(1).upper(), key)


def _compact(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in properties.items() if value is not None}


def _visibility_config(
    cloud_watch_metrics_enabled: Any, metric_name: str, sampled_requests_enabled: Any
) -> Dict[str, Any]:
    return {
        "cloudWatchMetricsEnabled": cloud_watch_metrics_enabled,
        "metricName": metric_name,
        "sampledRequestsEnabled": sampled_requests_enabled,
    }


class WebAcl(Construct):
    """A WAFv2 Web ACL that opinionated rules can be added to.

    Every ``enable_*`` method returns the WebAcl itself so calls can be
    chained::

        WebAcl(stack, "Waf", waf_scope=Scope.REGIONAL, metric_name="waf",
               default_action={"allow": {}}) \\
            .enable_ip_block_rule() \\
            .enable_rate_limit_rule(rate_limit=500)

    Attributes:
        cfn_web_acl: The underlying CfnWebACL.
        attr_arn: ARN of the Web ACL, used to associate it with resources.
        ip_set: The IP set referenced by the IP block rule, once enabled.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        waf_scope: Union[Scope, str],
        default_action: Any,
        metric_name: str,
        cloud_watch_metrics_enabled: Any = True,
        sampled_requests_enabled: Any = True,
        rules: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, construct_id)
        self.waf_scope = Scope(waf_scope)
        self.ip_set: Optional[wafv2.CfnIPSet] = None

        self._enabled_rules = set()
        self._lock = threading.RLock()
        self._rules_value = rules_value_of(rules)
        if isinstance(self._rules_value, RuleList):
            rules = self._rules_value.normalize()

        self.cfn_web_acl = wafv2.CfnWebACL(
            self,
            "WebAcl",
            scope=self.waf_scope.value,
            default_action=default_action,
            visibility_config=_visibility_config(
                cloud_watch_metrics_enabled, metric_name, sampled_requests_enabled
            ),
            rules=rules,
            **kwargs,
        )
        self.attr_arn = self.cfn_web_acl.attr_arn

    @property
    def rules(self) -> List[Any]:
        """Rules known to this WebAcl in insertion order.

        Raises:
            UnsupportedRulesValueError: If the rules were passed as a token,
                whose content is only known at synthesis.
        """
        if isinstance(self._rules_value, OpaqueRules):
            raise UnsupportedRulesValueError(
                "Cannot list rules passed as an unresolved token"
            )
        return self._rules_value.normalize()

    def is_rule_enabled(self, rule_id: Union[RuleId, str]) -> bool:
        return RuleId(rule_id) in self._enabled_rules

    def _check_if_rule_is_enabled(self, rule_id: RuleId) -> None:
        if rule_id in self._enabled_rules:
            raise DuplicateRuleEnabledError(rule_id.value)

    def _enable(self, rule_id: RuleId, build_rule: Callable[[], Rule]) -> "WebAcl":
        with self._lock:
            # nothing may be created before both checks passed
            self._check_if_rule_is_enabled(rule_id)
            rules = self._rules_value.normalize()

            rule = build_rule()
            rules.append(rule)
            self._rules_value = RuleList(rules)
            self.cfn_web_acl.rules = rules
            self._enabled_rules.add(rule_id)

            logger.info("Enabled %s rule on %s", rule_id.value, self.node.path)
        return self

    @staticmethod
    def _build_rule(
        name: str,
        priority: int,
        statement: Dict[str, Any],
        visibility_config: Dict[str, Any],
        rest: Dict[str, Any],
        action: Any = None,
        override_action: Any = None,
    ) -> Rule:
        rule = _compact(
            {
                "name": name,
                "priority": priority,
                "action": action,
                "overrideAction": override_action,
                "statement": statement,
                "visibilityConfig": visibility_config,
            }
        )
        # extra properties go through verbatim and win over the defaults above
        rule.update({_camel_case(key): value for key, value in rest.items()})
        return rule

    def enable_ip_block_rule(
        self,
        *,
        name: Optional[str] = None,
        metric_name: Optional[str] = None,
        priority: int = 10,
        action: Any = None,
        cloud_watch_metrics_enabled: Any = True,
        sampled_requests_enabled: Any = True,
        ip_set: Optional[wafv2.CfnIPSet] = None,
        ip_set_name: Optional[str] = None,
        ip_set_description: Optional[str] = None,
        addresses: Optional[Sequence[str]] = None,
        ip_address_version: Union[IpAddressVersion, str] = IpAddressVersion.IPV4,
        ip_set_tags: Optional[Sequence[Any]] = None,
        **rest: Any,
    ) -> "WebAcl":
        """Set up an IP set and a rule blocking the addresses found in it.

        The action can be overwritten to send a custom response or to invert
        the handling into an allow list.

        Args:
            name: Rule name. Defaults to ``ip-block``.
            metric_name: Metric name. Defaults to ``ip-block``.
            priority: Rule priority. Defaults to 10.
            action: Rule action. Defaults to ``{"block": {}}``.
            cloud_watch_metrics_enabled: Send metrics to CloudWatch.
            sampled_requests_enabled: Store a sample of matching requests.
            ip_set: Existing IP set to reference. When given, none is created
                and the ``ip_set_*`` arguments are ignored.
            ip_set_name: Name of the created IP set.
            ip_set_description: Description of the created IP set.
            addresses: CIDR ranges of the created IP set. Defaults to none.
            ip_address_version: ``IPV4`` (default) or ``IPV6``.
            ip_set_tags: Tags of the created IP set.
            **rest: Further rule properties, passed through unchanged.

        Returns:
            This WebAcl.

        Raises:
            DuplicateRuleEnabledError: If the rule has already been enabled.
        """
        rule_id = RuleId.IP_BLOCK

        def build_rule() -> Rule:
            if ip_set is not None:
                self.ip_set = ip_set
                logger.debug("Using existing IP set %s", ip_set.node.path)
            else:
                self.ip_set = wafv2.CfnIPSet(
                    self,
                    "IpSet",
                    name=ip_set_name,
                    description=ip_set_description,
                    scope=self.waf_scope.value,
                    addresses=list(addresses or []),
                    ip_address_version=IpAddressVersion(ip_address_version).value,
                    tags=ip_set_tags,
                )
                logger.debug(
                    "Created %s IP set with %d addresses",
                    IpAddressVersion(ip_address_version).value,
                    len(addresses or []),
                )

            return self._build_rule(
                name=rule_id.value if name is None else name,
                priority=priority,
                action={"block": {}} if action is None else action,
                statement={"ipSetReferenceStatement": {"arn": self.ip_set.attr_arn}},
                visibility_config=_visibility_config(
                    cloud_watch_metrics_enabled,
                    rule_id.value if metric_name is None else metric_name,
                    sampled_requests_enabled,
                ),
                rest=rest,
            )

        return self._enable(rule_id, build_rule)

    def enable_rate_limit_rule(
        self,
        *,
        name: Optional[str] = None,
        metric_name: Optional[str] = None,
        priority: int = 20,
        action: Any = None,
        rate_limit: int = 1000,
        cloud_watch_metrics_enabled: Any = True,
        sampled_requests_enabled: Any = True,
        **rest: Any,
    ) -> "WebAcl":
        """Set up a rule limiting the request rate per source IP.

        Args:
            name: Rule name. Defaults to ``rate-limit``.
            metric_name: Metric name. Defaults to ``rate-limit``.
            priority: Rule priority. Defaults to 20.
            action: Rule action. Defaults to blocking with a 429 response.
            rate_limit: Requests allowed per IP within the evaluation window.
                Defaults to 1000.
            cloud_watch_metrics_enabled: Send metrics to CloudWatch.
            sampled_requests_enabled: Store a sample of matching requests.
            **rest: Further rule properties, passed through unchanged.

        Returns:
            This WebAcl.

        Raises:
            DuplicateRuleEnabledError: If the rule has already been enabled.
        """
        rule_id = RuleId.RATE_LIMIT
        if action is None:
            action = {"block": {"customResponse": {"responseCode": 429}}}

        def build_rule() -> Rule:
            return self._build_rule(
                name=rule_id.value if name is None else name,
                priority=priority,
                action=action,
                statement={
                    "rateBasedStatement": {
                        "aggregateKeyType": "IP",
                        "limit": rate_limit,
                    }
                },
                visibility_config=_visibility_config(
                    cloud_watch_metrics_enabled,
                    rule_id.value if metric_name is None else metric_name,
                    sampled_requests_enabled,
                ),
                rest=rest,
            )

        return self._enable(rule_id, build_rule)

    def _enable_managed_rule(
        self,
        rule_id: RuleId,
        *,
        name: Optional[str] = None,
        metric_name: Optional[str] = None,
        priority: Optional[int] = None,
        cloud_watch_metrics_enabled: Any = True,
        sampled_requests_enabled: Any = True,
        excluded_rules: Any = None,
        managed_rule_group_configs: Any = None,
        scope_down_statement: Any = None,
        override_action: Any = None,
        **rest: Any,
    ) -> "WebAcl":
        # rules referencing a rule group take an override action, never an action
        if "action" in rest:
            raise TypeError(
                f"{rule_id.value} rule got an unexpected keyword argument 'action', "
                "use override_action for managed rule groups"
            )
        group = MANAGED_RULE_GROUPS[rule_id]

        def build_rule() -> Rule:
            return self._build_rule(
                name=rule_id.value if name is None else name,
                priority=group.priority if priority is None else priority,
                # none leaves the actions of the rules inside the group in effect
                override_action={"none": {}} if override_action is None else override_action,
                statement={
                    "managedRuleGroupStatement": _compact(
                        {
                            "vendorName": group.vendor_name,
                            "name": group.group_name,
                            "excludedRules": excluded_rules,
                            "managedRuleGroupConfigs": managed_rule_group_configs,
                            "scopeDownStatement": scope_down_statement,
                        }
                    )
                },
                visibility_config=_visibility_config(
                    cloud_watch_metrics_enabled,
                    rule_id.value if metric_name is None else metric_name,
                    sampled_requests_enabled,
                ),
                rest=rest,
            )

        return self._enable(rule_id, build_rule)

    def enable_ip_reputation_rule(self, **options: Any) -> "WebAcl":
        """Set up a rule enabling AWSManagedRulesAmazonIpReputationList.

        Accepts ``name``, ``metric_name``, ``priority`` (default 30),
        ``cloud_watch_metrics_enabled``, ``sampled_requests_enabled``,
        ``excluded_rules``, ``managed_rule_group_configs``,
        ``scope_down_statement`` and ``override_action`` (default
        ``{"none": {}}``); anything else except ``action`` is passed through.

        Raises:
            TypeError: If ``action`` is given, managed rule groups only take an
                override action.
        """
        return self._enable_managed_rule(RuleId.IP_REPUTATION, **options)

    def enable_managed_core_rule(self, **options: Any) -> "WebAcl":
        """Set up a rule enabling AWSManagedRulesCommonRuleSet.

        Same options as :meth:`enable_ip_reputation_rule`, priority defaults
        to 40.
        """
        return self._enable_managed_rule(RuleId.MANAGED_CORE, **options)

    def enable_bad_inputs_rule(self, **options: Any) -> "WebAcl":
        """Set up a rule enabling AWSManagedRulesKnownBadInputsRuleSet.

        Same options as :meth:`enable_ip_reputation_rule`, priority defaults
        to 50.
        """
        return self._enable_managed_rule(RuleId.BAD_INPUTS, **options)
