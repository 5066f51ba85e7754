"""
Tests for domain models — conditions, rules, groups, results.
"""

import pytest
from pydantic import ValidationError

from src.core.models import (
    DEFAULT_MESSAGE,
    Condition,
    EnvBinding,
    EnvSource,
    EnvVarRef,
    EnvWiring,
    Rule,
    RuleGroup,
    RuleSet,
    ValidationResult,
    WorkloadSpec,
)


class TestCondition:
    """Condition parsing and evaluation."""

    def test_default_op_is_present(self):
        c = Condition(key="a")
        assert c.op == "present"
        assert c.holds({"a": "x"}) is True
        assert c.holds({"a": ""}) is False

    def test_shorthand_equals(self):
        c = Condition.model_validate({"key": "global.edition", "equals": "enterprise"})
        assert c.op == "equals"
        assert c.value == "enterprise"

    def test_shorthand_flag(self):
        c = Condition.model_validate({"key": "global.auth.identityProvider", "configured": True})
        assert c.op == "configured"
        assert c.value is None

    def test_shorthand_one_of(self):
        c = Condition.model_validate({"key": "t", "one_of": ["oidc", "saml"]})
        assert c.holds({"t": "saml"}) is True
        assert c.holds({"t": "ldap"}) is False
        assert c.holds({}) is False

    def test_two_operators_rejected(self):
        with pytest.raises(ValidationError):
            Condition.model_validate({"key": "a", "equals": 1, "present": True})

    def test_unknown_op_rejected(self):
        with pytest.raises(ValidationError):
            Condition(key="a", op="matches")

    def test_empty_key_rejected(self):
        with pytest.raises(ValidationError):
            Condition(key="  ")

    def test_equals_requires_key(self):
        c = Condition(key="a", op="equals", value=None)
        assert c.holds({}) is False
        assert c.holds({"a": None}) is True

    def test_not_equals(self):
        c = Condition(key="edition", op="not_equals", value="community")
        assert c.holds({"edition": "enterprise"}) is True
        assert c.holds({}) is True
        assert c.holds({"edition": "community"}) is False

    @pytest.mark.parametrize("value,expected", [
        (True, True), ("true", True), ("yes", True), (1, True),
        (False, False), ("false", False), ("False", False), ("0", False),
        (0, False), ("", False), (None, False),
    ])
    def test_truthy(self, value, expected):
        assert Condition(key="f", op="truthy").holds({"f": value}) is expected

    def test_configured_by_child_key(self):
        c = Condition(key="global.auth.identityProvider", op="configured")
        assert c.holds({"global.auth.identityProvider.secretName": ""}) is True
        assert c.holds({"global.auth.identityProviderX": "x"}) is False
        assert c.holds({}) is False

    def test_configured_by_nested_mapping(self):
        c = Condition(key="sso", op="configured")
        assert c.holds({"sso": {"type": "oidc"}}) is True
        assert c.holds({"sso": {}}) is False
        assert c.holds({"sso": ""}) is True

    def test_null_section_is_not_configured(self):
        c = Condition(key="sso", op="configured")
        assert c.holds({"sso": None}) is False

    def test_describe(self):
        assert Condition(key="e", op="equals", value="x").describe() == "e == 'x'"
        assert Condition(key="s", op="configured").describe() == "s is configured"


class TestRule:

    def test_default_message(self):
        rule = Rule(key="a.b", when="enabling SSO")
        assert rule.message == DEFAULT_MESSAGE
        assert rule.render_message() == "You must set `a.b` when enabling SSO"

    def test_unknown_placeholder_rejected(self):
        with pytest.raises(ValidationError):
            Rule(key="a", message="missing {field}")

    def test_enabled_short_circuits(self):
        """A later guard is never reached once an ancestor fails."""
        rule = Rule(key="x", guards=[
            Condition(key="outer", op="truthy"),
            Condition(key="inner", op="equals", value="oidc"),
        ])
        assert rule.enabled({"inner": "oidc"}) is False
        assert rule.enabled({"outer": True, "inner": "oidc"}) is True


class TestRuleGroup:

    def test_single_condition_mapping_accepted(self):
        g = RuleGroup.model_validate({"when": {"key": "a", "truthy": True}, "require": ["b"]})
        assert len(g.when) == 1

    def test_compile_inherits_guards_and_description(self):
        group = RuleGroup(
            name="enterprise",
            when=[Condition(key="edition", op="equals", value="enterprise")],
            describe="enterprise",
            require=["license"],
            groups=[RuleGroup(name="sso", when=[Condition(key="sso", op="configured")],
                              require=["sso.type"])],
        )
        rules = group.compile()
        assert [r.key for r in rules] == ["license", "sso.type"]
        assert [g.key for g in rules[1].guards] == ["edition", "sso"]
        assert rules[1].when == "enterprise"
        assert rules[1].name == "sso:sso.type"

    def test_child_message_override(self):
        group = RuleGroup(describe="x", require=["a"], groups=[
            RuleGroup(message="{key}!", require=["b"]),
        ])
        rules = group.compile()
        assert rules[0].render_message() == "You must set `a` when x"
        assert rules[1].render_message() == "b!"


class TestRuleSet:

    def test_from_groups_keeps_flat_rules_first(self):
        rs = RuleSet.from_groups(
            [RuleGroup(require=["g1", "g2"])],
            name="mixed",
            rules=[Rule(key="flat")],
        )
        assert rs.name == "mixed"
        assert rs.target_keys == ["flat", "g1", "g2"]

    def test_round_trips_through_dump(self):
        rs = RuleSet.from_groups([RuleGroup(when=[Condition(key="a")], require=["b"])])
        again = RuleSet.model_validate(rs.model_dump())
        assert again == rs


class TestValidationResult:

    def test_ok(self):
        r = ValidationResult.ok()
        assert r.valid is True
        assert bool(r) is True
        assert r.to_dict() == {"valid": True, "violations": []}

    def test_invalid(self):
        r = ValidationResult.invalid(["one", "two"])
        assert r.valid is False
        assert r.messages == ("one", "two")
        assert r.to_dict()["violations"] == ["one", "two"]

    def test_frozen(self):
        r = ValidationResult.ok()
        with pytest.raises(AttributeError):
            r.messages = ("x",)  # type: ignore[misc]


class TestEnvModels:

    def test_ref_equality_and_str(self):
        a = EnvVarRef(source=EnvSource.SECRET, name="sso-secrets", key="client-id")
        assert a == EnvVarRef(source="secretKeyRef", name="sso-secrets", key="client-id")
        assert str(a) == "secretKeyRef(sso-secrets/client-id)"

    def test_binding_applies_to_all_by_default(self):
        assert EnvBinding(var="X").applies_to("server") is True
        assert EnvBinding(var="X", workloads=["server"]).applies_to("worker") is False

    def test_unknown_workload(self):
        wiring = EnvWiring(name="c", workloads={"server": WorkloadSpec(kind="Deployment", name="s")})
        with pytest.raises(KeyError, match="server"):
            wiring.workload("worker")
