"""Tests for primitive casters, caster variants and pydantic adapters."""

from __future__ import annotations

import datetime as dt
import decimal
from typing import Annotated

import pytest
from pydantic import BaseModel, StringConstraints, TypeAdapter, ValidationError

from typedstore import CastError, ConstraintError, types
from typedstore.types import primitives


class Parcel(BaseModel):
    weight: int = 0
    fragile: bool = False


class TestIntegerCaster:
    def test_casts_numeric_strings(self):
        assert types.Integer.cast("123") == 123
        assert types.Integer.cast(" 42 ") == 42

    def test_truncates_decimal_strings_and_floats(self):
        assert types.Integer.cast("12.7") == 12
        assert types.Integer.cast(3.9) == 3

    def test_booleans_become_ints(self):
        result = types.Integer.cast(True)
        assert result == 1
        assert type(result) is int

    def test_blank_is_none(self):
        assert types.Integer.cast("") is None
        assert types.Integer.cast("   ") is None
        assert types.Integer.cast(None) is None

    def test_garbage_raises_cast_error(self):
        with pytest.raises(CastError, match="integer"):
            types.Integer.cast("abc")

    def test_cast_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            types.Integer.cast([1, 2])


class TestFloatAndDecimalCasters:
    def test_float(self):
        assert types.Float.cast("1.5") == 1.5
        assert types.Float.cast(2) == 2.0
        assert types.Float.cast("") is None

    def test_float_garbage(self):
        with pytest.raises(CastError):
            types.Float.cast("one and a half")

    def test_decimal(self):
        assert types.Decimal.cast("1.10") == decimal.Decimal("1.10")
        assert types.Decimal.cast(2.5) == decimal.Decimal("2.5")

    def test_decimal_scale_quantizes(self):
        caster = types.DecimalCaster(scale=2)
        assert caster.cast("1.234") == decimal.Decimal("1.23")
        assert repr(caster) == "decimal(scale=2)"

    def test_decimal_garbage(self):
        with pytest.raises(CastError):
            types.Decimal.cast("n/a")


class TestStringCaster:
    def test_non_strings_are_stringified(self):
        assert types.String.cast(12) == "12"

    def test_booleans_use_short_form(self):
        assert types.String.cast(True) == "t"
        assert types.String.cast(False) == "f"

    def test_strings_pass_through_unchanged(self):
        value = "hello"
        assert types.String.cast(value) is value

    def test_strip_option(self):
        assert types.StringCaster(strip=True).cast("  padded ") == "padded"
        assert types.String.cast("  padded ") == "  padded "


class TestBooleanCaster:
    @pytest.mark.parametrize("raw", ["0", "f", "F", "false", "FALSE", "off", "OFF", 0, 0.0, False])
    def test_false_values(self, raw):
        assert types.Bool.cast(raw) is False

    @pytest.mark.parametrize("raw", ["1", "t", "true", "yes", "on", 1, 2.5, True])
    def test_true_values(self, raw):
        assert types.Bool.cast(raw) is True

    def test_empty_string_is_none(self):
        assert types.Bool.cast("") is None
        assert types.Bool.cast(None) is None


class TestTemporalCasters:
    def test_datetime_from_iso_string(self):
        assert types.DateTime.cast("2020-02-02 11:11:11") == dt.datetime(2020, 2, 2, 11, 11, 11)
        assert types.DateTime.cast("2020-02-02T11:11:11") == dt.datetime(2020, 2, 2, 11, 11, 11)

    def test_datetime_utc_suffix(self):
        result = types.DateTime.cast("2020-02-02 11:11:11 UTC")
        assert result == dt.datetime(2020, 2, 2, 11, 11, 11, tzinfo=dt.timezone.utc)

    def test_datetime_from_date(self):
        assert types.DateTime.cast(dt.date(2020, 2, 2)) == dt.datetime(2020, 2, 2)

    def test_datetime_timezone_applies_to_naive_values(self):
        caster = types.DateTimeCaster(timezone="UTC")
        assert caster.cast("2020-02-02 11:11:11").tzinfo is dt.timezone.utc

        moscow = types.DateTimeCaster(timezone="Europe/Moscow").cast("2020-02-02 11:11:11")
        assert moscow.utcoffset() == dt.timedelta(hours=3)

    def test_datetime_timezone_keeps_aware_values(self):
        caster = types.DateTimeCaster(timezone="Europe/Moscow")
        result = caster.cast("2020-02-02 11:11:11+00:00")
        assert result.utcoffset() == dt.timedelta(0)

    def test_unknown_timezone_rejected(self):
        with pytest.raises(TypeError, match="timezone"):
            types.DateTimeCaster(timezone="Mars/Olympus_Mons")

    def test_datetime_garbage(self):
        with pytest.raises(CastError):
            types.DateTime.cast("yesterday-ish")
        with pytest.raises(CastError):
            types.DateTime.cast(12345)

    def test_date(self):
        assert types.Date.cast("2020-02-02") == dt.date(2020, 2, 2)
        assert types.Date.cast(dt.datetime(2020, 2, 2, 10, 0)) == dt.date(2020, 2, 2)

    def test_time(self):
        assert types.Time.cast("11:11:11") == dt.time(11, 11, 11)
        assert types.Time.cast(dt.datetime(2020, 2, 2, 10, 30)) == dt.time(10, 30)


class TestJSONCaster:
    def test_passthrough_keeps_identity(self):
        blob = {"a": [1, 2]}
        assert types.JSON.cast(blob) is blob

    def test_decode_option(self):
        caster = types.JSONCaster(decode=True)
        assert caster.cast('{"a": 1}') == {"a": 1}
        assert caster.cast({"a": 1}) == {"a": 1}

    def test_decode_garbage(self):
        with pytest.raises(CastError):
            types.JSONCaster(decode=True).cast("{not json")


class TestConstrained:
    def test_format(self):
        email = types.String.constrained(format=r"@")
        assert email.cast("user@example.com") == "user@example.com"
        with pytest.raises(ConstraintError, match="format"):
            email.cast("not-an-email")

    def test_range(self):
        port = types.Integer.constrained(gteq=1, lteq=65535)
        assert port.cast("8080") == 8080
        with pytest.raises(ConstraintError) as exc_info:
            port.cast("70000")
        assert exc_info.value.rule == "lteq=65535"
        assert exc_info.value.value == 70000

    def test_included_in(self):
        level = types.String.constrained(included_in={"low", "high"})
        assert level.cast("low") == "low"
        with pytest.raises(ConstraintError):
            level.cast("medium")

    def test_sizes(self):
        tags = types.JSON.constrained(min_size=1, max_size=2)
        assert tags.cast(["a"]) == ["a"]
        with pytest.raises(ConstraintError):
            tags.cast([])
        with pytest.raises(ConstraintError):
            tags.cast(["a", "b", "c"])

    def test_inapplicable_rule_is_a_violation(self):
        with pytest.raises(ConstraintError):
            types.Integer.constrained(min_size=1).cast(5)

    def test_none_skips_rules(self):
        assert types.Integer.constrained(gt=0).cast(None) is None

    def test_unknown_rule_rejected(self):
        with pytest.raises(ValueError, match="Unknown constraint"):
            types.Integer.constrained(between=(1, 2))

    def test_included_in_must_be_a_container(self):
        with pytest.raises(ValueError, match="included_in"):
            types.Integer.constrained(included_in=5)

    def test_original_caster_unchanged(self):
        types.Integer.constrained(gt=100)
        assert types.Integer.cast(1) == 1

    def test_repr(self):
        assert repr(types.String.constrained(format="@")) == "string.constrained(format='@')"


class TestDefaulted:
    def test_carries_default(self):
        caster = types.Bool.with_default(False)
        assert caster.has_default is True
        assert caster.default is False
        assert caster.cast("0") is False

    def test_none_default_means_no_default(self):
        assert types.Bool.with_default(None).has_default is False

    def test_constrained_keeps_wrapped_default(self):
        caster = types.Integer.with_default(5).constrained(gt=0)
        assert caster.has_default is True
        assert caster.default == 5

    def test_plain_casters_have_no_default(self):
        assert types.Integer.has_default is False
        assert types.Integer.default is None


class TestCustomCaster:
    def test_wraps_function(self):
        upper = types.custom(lambda v: None if v is None else str(v).upper())
        assert upper.cast("abc") == "ABC"
        assert isinstance(upper, types.Caster)

    def test_name_uses_function_name(self):
        def slugify(value):
            return str(value).lower().replace(" ", "-")

        assert repr(types.custom(slugify)) == "custom(slugify)"


class TestPydanticAdapters:
    def test_model_from_dict(self):
        caster = types.adapt(Parcel)
        parcel = caster.cast({"weight": "3"})
        assert parcel == Parcel(weight=3)

    def test_model_instance_kept(self):
        parcel = Parcel(weight=1)
        assert types.adapt(Parcel).cast(parcel) is parcel

    def test_none_is_none(self):
        assert types.adapt(Parcel).cast(None) is None

    def test_validation_errors_propagate(self):
        with pytest.raises(ValidationError):
            types.adapt(Parcel).cast({"weight": "heavy"})

    def test_list_of_models(self):
        result = types.adapt(list[Parcel]).cast([{"weight": 1}, {"weight": 2}])
        assert result == [Parcel(weight=1), Parcel(weight=2)]

    def test_annotated_constraints(self):
        digits = types.adapt(Annotated[str, StringConstraints(pattern=r"^\d+$")])
        assert digits.cast("123") == "123"
        with pytest.raises(ValidationError):
            digits.cast("12a")

    def test_type_adapter_instance(self):
        caster = types.adapt(TypeAdapter(list[int]))
        assert caster.cast(["1", "2"]) == [1, 2]

    def test_unsupported_type_raises_type_error(self):
        class Opaque:
            pass

        with pytest.raises(TypeError):
            types.adapt(Opaque)

    def test_name(self):
        assert repr(types.adapt(Parcel)) == "adapt(Parcel)"

    def test_is_adaptable(self):
        assert types.is_adaptable(Parcel)
        assert types.is_adaptable(list[Parcel])
        assert types.is_adaptable(TypeAdapter(int))
        assert not types.is_adaptable(types.IntegerCaster)
        assert not types.is_adaptable("integer")


class TestTypeRegistry:
    @pytest.fixture(autouse=True)
    def isolated_registry(self, monkeypatch):
        monkeypatch.setattr(primitives, "_TYPES", dict(primitives._TYPES))

    def test_builtin_tags(self):
        tags = types.registered_types()
        for tag in ("integer", "int", "float", "decimal", "string", "str",
                    "boolean", "bool", "datetime", "date", "time", "json"):
            assert tag in tags

    def test_lookup_with_options(self):
        caster = types.lookup_type("string", strip=True)
        assert caster.cast(" x ") == "x"

    def test_lookup_unknown_tag(self):
        with pytest.raises(KeyError):
            types.lookup_type("uuid")

    def test_lookup_bad_options(self):
        with pytest.raises(TypeError):
            types.lookup_type("integer", scale=2)

    def test_register_custom_tag(self):
        @types.register_type("shout")
        class ShoutCaster(types.BaseCaster):
            name = "shout"

            def cast(self, value):
                return None if value is None else f"{value}!"

        assert "shout" in types.registered_types()
        assert types.lookup_type("shout").cast("hi") == "hi!"
