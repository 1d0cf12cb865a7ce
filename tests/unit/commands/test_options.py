"""
Tests for option builders.

Covers:
- Constructor constraints and chainable setters produce equal options
- Bound validation (min > max, bounds on non-numeric kinds)
- Name / description rules
- Payload shape and parsing
"""

import pytest
from pydantic import ValidationError

from demobot.commands import (
    BooleanOption,
    IntegerOption,
    NumberOption,
    Option,
    OptionKind,
    StringOption,
)
from demobot.errors import BadSchema


class TestBuilderForms:
    def test_constructor_and_chained_setters_are_equal(self):
        """IntegerOption(min=1, max=5, required=True) == chained equivalent."""
        built = IntegerOption("age", "How old?", required=True, min=1, max=5)
        chained = IntegerOption("age", "How old?").mark_required().min(1).max(5)
        assert built == chained
        assert built.to_payload() == chained.to_payload()

    def test_number_option_accepts_float_bounds(self):
        opt = NumberOption("ratio", "A ratio").min(0.5).max(1.5)
        assert opt.min_value == 0.5
        assert opt.max_value == 1.5

    def test_setters_return_new_option(self):
        opt = IntegerOption("n", "A number")
        bounded = opt.min(1).mark_required()
        assert bounded is not opt
        assert type(bounded) is IntegerOption
        assert (bounded.min_value, bounded.required) == (1, True)
        assert (opt.min_value, opt.required) == (None, False)

    def test_options_are_immutable(self):
        opt = IntegerOption("n", "A number", min=5)
        with pytest.raises(ValidationError):
            opt.max_value = 1
        assert opt.max_value is None

    @pytest.mark.parametrize(
        "builder, kind",
        [
            (StringOption, OptionKind.STRING),
            (IntegerOption, OptionKind.INTEGER),
            (NumberOption, OptionKind.NUMBER),
            (BooleanOption, OptionKind.BOOLEAN),
        ],
    )
    def test_each_builder_sets_its_kind(self, builder, kind):
        assert builder("x", "An option").type is kind

    def test_required_defaults_to_false(self):
        assert StringOption("name", "Your name").required is False


class TestValidation:
    def test_min_greater_than_max_in_constructor(self):
        with pytest.raises(BadSchema):
            IntegerOption("n", "A number", min=5, max=1)

    def test_min_greater_than_max_via_setters(self):
        with pytest.raises(BadSchema):
            IntegerOption("n", "A number").max(1).min(5)

    def test_equal_bounds_are_allowed(self):
        opt = IntegerOption("n", "A number", min=3, max=3)
        assert opt.min_value == opt.max_value == 3

    def test_bounds_rejected_on_string_option(self):
        with pytest.raises(BadSchema):
            StringOption("name", "Your name").min(1)

    def test_float_bound_rejected_on_integer_option(self):
        with pytest.raises(BadSchema):
            IntegerOption("n", "A number", min=1.5)

    @pytest.mark.parametrize("name", ["", "Upper", "has space", "x" * 33])
    def test_invalid_names(self, name):
        with pytest.raises(BadSchema):
            StringOption(name, "Description")

    @pytest.mark.parametrize("description", ["", "d" * 101])
    def test_invalid_descriptions(self, description):
        with pytest.raises(BadSchema):
            StringOption("name", description)


class TestPayload:
    def test_integer_payload_uses_discord_fields(self):
        payload = IntegerOption("age", "How old?", min=1).to_payload()
        assert payload == {
            "type": 4,
            "name": "age",
            "description": "How old?",
            "required": False,
            "min_value": 1,
        }

    def test_string_payload_omits_bounds(self):
        payload = StringOption("name", "Your name", required=True).to_payload()
        assert payload == {"type": 3, "name": "name", "description": "Your name", "required": True}

    @pytest.mark.parametrize(
        "option",
        [
            StringOption("s", "String"),
            IntegerOption("i", "Integer", required=True, min=-3, max=7),
            NumberOption("f", "Number", min=0.25),
            BooleanOption("b", "Boolean", required=True),
        ],
    )
    def test_parse_restores_equal_option(self, option):
        parsed = Option.from_payload(option.to_payload())
        assert parsed == option
        assert type(parsed) is type(option)

    def test_parse_rejects_unsupported_kind(self):
        with pytest.raises(BadSchema):
            Option.from_payload({"type": 6, "name": "who", "description": "A user"})

    def test_parse_unknown_type_code_is_bad_schema(self):
        with pytest.raises(BadSchema, match="Unknown option type 99"):
            Option.from_payload({"type": 99, "name": "x", "description": "Mystery"})

    @pytest.mark.parametrize("missing", ["type", "name", "description"])
    def test_parse_missing_key_is_bad_schema(self, missing):
        payload = {"type": 3, "name": "s", "description": "String"}
        del payload[missing]
        with pytest.raises(BadSchema, match=repr(missing)):
            Option.from_payload(payload)
