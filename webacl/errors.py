"""Exceptions raised while composing a Web ACL."""


class WebAclError(Exception):
    """Base exception with a message and an optional hint.

    Attributes:
        message: The main error message.
        hint: Optional hint for resolving the error.
    """

    def __init__(self, message: str, hint: str = "") -> None:
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class DuplicateRuleEnabledError(WebAclError):
    """An opinionated rule was enabled twice on the same Web ACL."""

    def __init__(self, rule_id: str, hint: str = "") -> None:
        self.rule_id = rule_id
        if not hint:
            hint = f"Call the enable method for '{rule_id}' only once per WebAcl."
        super().__init__(f"{rule_id} has already been enabled", hint)


class UnsupportedRulesValueError(WebAclError):
    """The existing rules value is a token that cannot be appended to."""

    def __init__(
        self,
        message: str = "Cannot append rules to an unresolved rules token",
        hint: str = "Pass the initial rules as a list instead of an IResolvable.",
    ) -> None:
        super().__init__(message, hint)
