"""Pytest configuration and fixtures for webacl tests."""

import aws_cdk as cdk
import pytest

from webacl import Scope, WebAcl


@pytest.fixture
def stack() -> cdk.Stack:
    """Create an empty, environment agnostic stack."""
    return cdk.Stack(cdk.App(), "TestStack")


@pytest.fixture
def web_acl(stack: cdk.Stack) -> WebAcl:
    """Create a regional WebAcl with minimal configuration."""
    return WebAcl(
        stack,
        "MyWaf",
        waf_scope=Scope.REGIONAL,
        metric_name="something",
        default_action={"allow": {}},
    )
