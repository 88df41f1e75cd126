from aws_cdk import (
    Stack,
    aws_wafv2 as wafv2,
    CfnOutput
)
from constructs import Construct

from webacl.models import Scope
from webacl.web_acl import WebAcl


def _as_list(value):
    # -c wafBlockedAddresses=a,b arrives as a string, cdk.json gives a list
    if not value:
        return []
    if isinstance(value, str):
        return [address.strip() for address in value.split(",") if address.strip()]
    return list(value)


def _as_bool(value, default):
    if value is None:
        return default
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


class WafStack(Stack):
    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        waf_scope = Scope(self.node.try_get_context("wafScope") or Scope.CLOUDFRONT.value)
        metric_name = self.node.try_get_context("wafMetricName") or "WebAcl"
        blocked_addresses = _as_list(self.node.try_get_context("wafBlockedAddresses"))
        rate_limit = int(self.node.try_get_context("wafRateLimit") or 1000)
        enable_managed_rules = _as_bool(self.node.try_get_context("wafEnableManagedRules"), True)

        self.web_acl = WebAcl(self,
            "WebAcl",
            waf_scope=waf_scope,
            name=metric_name,
            description=f"{metric_name} {waf_scope.value} Web ACL",
            default_action=wafv2.CfnWebACL.DefaultActionProperty(allow={}),
            metric_name=metric_name)

        self.web_acl \
            .enable_ip_block_rule(addresses=blocked_addresses) \
            .enable_rate_limit_rule(rate_limit=rate_limit)

        # AWS managed rule groups, evaluated after the custom rules
        if enable_managed_rules:
            self.web_acl \
                .enable_ip_reputation_rule() \
                .enable_managed_core_rule() \
                .enable_bad_inputs_rule()

        # Export the WAF ACL ARN
        self.waf_acl_arn = self.web_acl.attr_arn

        CfnOutput(self, "WafAclArn",
            value=self.waf_acl_arn,
            description=f"ARN of the {waf_scope.value} WAF ACL")
        CfnOutput(self, "WafIpSetArn",
            value=self.web_acl.ip_set.attr_arn,
            description="ARN of the IP set holding blocked addresses")
