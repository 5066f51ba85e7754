"""
Tests for the requirement validator — absence rules, gating, ordering.

Source module:
  - values_validate.validate / is_absent / enabled_rules
"""

import pytest

from src.core.models import Condition, Rule, RuleGroup, RuleSet, ValidationResult
from src.core.services.values_validate import enabled_rules, is_absent, validate


@pytest.fixture
def feature_rules() -> RuleSet:
    """feature.enabled → feature.name; and when mode == advanced → feature.level."""
    return RuleSet.from_groups([
        RuleGroup(
            when=[Condition(key="feature.enabled", op="truthy")],
            describe="enabling the feature",
            require=["feature.name"],
            groups=[
                RuleGroup(
                    when=[Condition(key="feature.mode", op="equals", value="advanced")],
                    require=["feature.level"],
                ),
            ],
        ),
    ], name="feature")


# ═══════════════════════════════════════════════════════════════════
#  1. ABSENCE
# ═══════════════════════════════════════════════════════════════════


class TestIsAbsent:

    @pytest.mark.parametrize("config", [{}, {"a": None}, {"a": ""}])
    def test_absent(self, config):
        assert is_absent(config, "a") is True

    @pytest.mark.parametrize("value", [" ", "\t", "x", False, 0, ["item"], {"k": "v"}])
    def test_present(self, value):
        """Only None and the exact empty string count as unset."""
        assert is_absent({"a": value}, "a") is False


# ═══════════════════════════════════════════════════════════════════
#  2. VALIDATE
# ═══════════════════════════════════════════════════════════════════


class TestValidate:

    def test_empty_rule_set_is_valid(self):
        assert validate({"anything": ""}, RuleSet()) == ValidationResult.ok()

    def test_unguarded_rule_always_applies(self):
        rules = RuleSet(rules=[Rule(key="image.tag", when="rendering")])
        result = validate({}, rules)
        assert result.messages == ("You must set `image.tag` when rendering",)

    def test_whitespace_value_satisfies_rule(self):
        rules = RuleSet(rules=[Rule(key="image.tag", when="rendering")])
        assert validate({"image.tag": "  "}, rules).valid

    def test_disabled_feature_never_fires(self, feature_rules):
        config = {"feature.enabled": False, "feature.mode": "advanced"}
        assert validate(config, feature_rules).valid

    def test_enabled_feature_requires_name(self, feature_rules):
        result = validate({"feature.enabled": True}, feature_rules)
        assert result.messages == ("You must set `feature.name` when enabling the feature",)

    def test_leaf_rule_needs_every_ancestor(self, feature_rules):
        """mode == advanced alone does not enable the leaf rule."""
        assert validate({"feature.mode": "advanced"}, feature_rules).valid

    def test_leaf_rule_inherits_description(self, feature_rules):
        config = {"feature.enabled": "true", "feature.name": "x", "feature.mode": "advanced"}
        result = validate(config, feature_rules)
        assert result.messages == ("You must set `feature.level` when enabling the feature",)

    def test_all_violations_in_declaration_order(self):
        rules = RuleSet(rules=[
            Rule(key="c", when="always"),
            Rule(key="a", when="always"),
            Rule(key="b", when="always"),
        ])
        result = validate({"a": ""}, rules)
        assert [m.split("`")[1] for m in result.messages] == ["c", "a", "b"]

    def test_independent_rules_still_evaluate(self):
        gate = Condition(key="edition", op="equals", value="enterprise")
        rules = RuleSet(rules=[
            Rule(key="license", guards=[gate], when="enterprise"),
            Rule(key="admin", guards=[gate], when="enterprise"),
        ])
        result = validate({"edition": "enterprise", "license": ""}, rules)
        assert len(result.messages) == 2

    def test_malformed_values_do_not_raise(self, feature_rules):
        config = {
            "feature.enabled": ["unexpected"],
            "feature.mode": {"nested": True},
            "feature.name": 12,
        }
        result = validate(config, feature_rules)
        assert result.valid

    def test_custom_message_template(self):
        rules = RuleSet(rules=[Rule(key="db.host", when="using postgres",
                                    message="{key} is required ({when})")])
        assert validate({}, rules).messages == ("db.host is required (using postgres)",)

    def test_idempotent(self, feature_rules):
        config = {"feature.enabled": True, "feature.mode": "advanced"}
        assert validate(config, feature_rules) == validate(config, feature_rules)

    def test_does_not_mutate_inputs(self, feature_rules):
        config = {"feature.enabled": True}
        before_rules = feature_rules.model_dump()
        validate(config, feature_rules)
        assert config == {"feature.enabled": True}
        assert feature_rules.model_dump() == before_rules


class TestEnabledRules:

    def test_lists_only_enabled(self, feature_rules):
        keys = [r.key for r in enabled_rules({"feature.enabled": True}, feature_rules)]
        assert keys == ["feature.name"]

    def test_nested_enabled(self, feature_rules):
        config = {"feature.enabled": True, "feature.mode": "advanced"}
        keys = [r.key for r in enabled_rules(config, feature_rules)]
        assert keys == ["feature.name", "feature.level"]
