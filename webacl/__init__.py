from webacl.errors import (
    DuplicateRuleEnabledError,
    UnsupportedRulesValueError,
    WebAclError,
)
from webacl.models import IpAddressVersion, RuleId, Scope
from webacl.web_acl import WebAcl

__all__ = [
    "DuplicateRuleEnabledError",
    "IpAddressVersion",
    "RuleId",
    "Scope",
    "UnsupportedRulesValueError",
    "WebAcl",
    "WebAclError",
]
