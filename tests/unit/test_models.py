"""Tests for models and errors."""

import aws_cdk as cdk
import pytest
from aws_cdk import aws_wafv2 as wafv2

from webacl.errors import DuplicateRuleEnabledError, UnsupportedRulesValueError, WebAclError
from webacl.models import (
    MANAGED_RULE_GROUPS,
    EmptyRules,
    OpaqueRules,
    RuleId,
    RuleList,
    RulesValue,
    Scope,
    rules_value_of,
)


class TestRulesValue:
    """Tests for classifying an existing rules value."""

    def test_base_cannot_be_instantiated(self) -> None:
        """Test only the concrete variants can be created."""
        with pytest.raises(TypeError):
            RulesValue()

    def test_none_is_empty(self) -> None:
        """Test None means no rules yet."""
        value = rules_value_of(None)

        assert isinstance(value, EmptyRules)
        assert value.normalize() == []

    def test_list_is_copied(self) -> None:
        """Test normalizing a list does not share it."""
        rules = [{"name": "a"}]
        value = rules_value_of(rules)

        normalized = value.normalize()
        normalized.append({"name": "b"})

        assert isinstance(value, RuleList)
        assert value.items == [{"name": "a"}]
        assert rules == [{"name": "a"}]

    def test_single_rule_is_wrapped(self) -> None:
        """Test a lone rule dict becomes a one element list."""
        value = rules_value_of({"name": "a"})

        assert value.normalize() == [{"name": "a"}]

    def test_single_rule_property_is_wrapped(self) -> None:
        """Test a lone RuleProperty becomes a one element list."""
        rule = wafv2.CfnWebACL.RuleProperty(
            name="a",
            priority=1,
            statement=wafv2.CfnWebACL.StatementProperty(),
            visibility_config=wafv2.CfnWebACL.VisibilityConfigProperty(
                cloud_watch_metrics_enabled=True,
                metric_name="a",
                sampled_requests_enabled=True,
            ),
        )

        assert rules_value_of(rule).normalize() == [rule]

    def test_token_is_opaque(self) -> None:
        """Test a token cannot be normalized."""
        value = rules_value_of(cdk.Token.as_any([]))

        assert isinstance(value, OpaqueRules)
        with pytest.raises(UnsupportedRulesValueError):
            value.normalize()


class TestManagedRuleGroups:
    """Tests for the managed rule group table."""

    def test_groups(self) -> None:
        """Test priorities and group names of the managed rules."""
        assert {
            rule_id.value: (group.priority, group.vendor_name, group.group_name)
            for rule_id, group in MANAGED_RULE_GROUPS.items()
        } == {
            "ip-reputation": (30, "AWS", "AWSManagedRulesAmazonIpReputationList"),
            "managed-core": (40, "AWS", "AWSManagedRulesCommonRuleSet"),
            "bad-inputs": (50, "AWS", "AWSManagedRulesKnownBadInputsRuleSet"),
        }

    def test_enum_values(self) -> None:
        """Test enums accept their CloudFormation string values."""
        assert Scope("REGIONAL") is Scope.REGIONAL
        assert RuleId("ip-block") is RuleId.IP_BLOCK


class TestErrors:
    """Tests for error messages."""

    def test_duplicate_rule_message(self) -> None:
        """Test the message names the rule and carries a hint."""
        error = DuplicateRuleEnabledError("rate-limit")

        assert isinstance(error, WebAclError)
        assert error.rule_id == "rate-limit"
        assert error.message == "rate-limit has already been enabled"
        assert str(error).startswith("rate-limit has already been enabled\nHint: ")

    def test_no_hint(self) -> None:
        """Test the message alone when no hint is given."""
        assert str(WebAclError("broken")) == "broken"
