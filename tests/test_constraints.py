"""Tests for constraint sets.

Tests Constraints construction (typed fields, option bag, builder), the
coercions, and the fixed evaluation order of the constraint chain.
"""

import math
from decimal import Decimal
from fractions import Fraction

import pytest
from hypothesis import given, strategies as st

from configuru.errors import (
    CapabilityMissingError,
    CoercionError,
    EmptyNotAllowedError,
    HostMissingError,
    LockedError,
    NullNotAllowedError,
    RangeError,
    TypeConstraintError,
)
from configuru.parameters.constraints import (
    MISSING,
    Coercion,
    ConstraintBuilder,
    Constraints,
    coerce,
)


class TestConstraintsConstruction:
    """Tests for building Constraints values."""

    def test_defaults_are_permissive(self):
        """Test that an empty constraint set accepts anything unchanged."""
        constraints = Constraints()
        value = object()
        assert constraints.apply("x", value) is value
        assert constraints.apply("x", None) is None

    def test_must_be_single_type_normalized(self):
        """Test that a single type becomes a one-element tuple."""
        assert Constraints(must_be=int).must_be == (int,)

    def test_must_be_rejects_non_types(self):
        """Test that must_be entries must be classes."""
        with pytest.raises(TypeError, match="must_be expects types"):
            Constraints(must_be=[int, "str"])

    def test_must_respond_to_single_name_normalized(self):
        """Test that a single capability name becomes a tuple."""
        assert Constraints(must_respond_to="read").must_respond_to == ("read",)

    def test_coercion_from_string(self):
        """Test that coercions can be named by string."""
        assert Constraints(coercion="int").coercion is Coercion.INT
        assert Constraints(coercion="make_float").coercion is Coercion.FLOAT

    def test_unknown_coercion_name(self):
        """Test that unknown coercion names raise."""
        with pytest.raises(ValueError, match="Unknown coercion 'decimal'"):
            Constraints(coercion="decimal")

    def test_one_shot_iterable_members_frozen(self):
        """Test that generator membership sets survive repeated checks."""
        constraints = Constraints(members=(n for n in (1, 2, 3)))
        assert constraints.apply("x", 2) == 2
        assert constraints.apply("x", 3) == 3

    def test_non_container_members_rejected(self):
        """Test that 'in' needs a container."""
        with pytest.raises(TypeError, match="needs a container"):
            Constraints(members=5)

    def test_convert_must_be_callable_or_name(self):
        """Test that convert accepts only callables and method names."""
        with pytest.raises(TypeError, match="convert must be"):
            Constraints(convert=42)

    def test_immutable(self):
        """Test that Constraints is frozen."""
        constraints = Constraints()
        with pytest.raises(Exception):  # FrozenInstanceError
            constraints.not_nil = True


class TestFromOptions:
    """Tests for the option-bag constructor."""

    def test_translates_option_names(self):
        """Test that option names map onto typed fields."""
        constraints = Constraints.from_options(
            lockable=True, not_nil=1, max=10, min=0, make_int=True, convert=str
        )
        assert constraints.lockable is True
        assert constraints.not_nil is True
        assert constraints.maximum == 10
        assert constraints.minimum == 0
        assert constraints.coercion is Coercion.INT
        assert constraints.convert is str

    @pytest.mark.parametrize("key", ["in", "in_", "within"])
    def test_membership_spellings(self, key):
        """Test that every spelling of the 'in' option is accepted."""
        constraints = Constraints.from_options(**{key: [1, 2, 3]})
        assert constraints.members == [1, 2, 3]

    def test_two_membership_spellings_rejected(self):
        """Test that 'in' cannot be given twice under different names."""
        with pytest.raises(TypeError, match="Only one of"):
            Constraints.from_options(in_=[1], within=[2])

    def test_unknown_option(self):
        """Test that unknown option names raise TypeError."""
        with pytest.raises(TypeError, match="Unknown constraint option: 'maximum'"):
            Constraints.from_options(maximum=5)

    def test_multiple_coercions_rejected(self):
        """Test that declaring two coercions is an error."""
        with pytest.raises(ValueError, match="At most one coercion"):
            Constraints.from_options(make_int=True, make_string=True)

    def test_false_coercion_flag_ignored(self):
        """Test that make_*=False does not request a coercion."""
        constraints = Constraints.from_options(make_int=True, make_string=False)
        assert constraints.coercion is Coercion.INT

    def test_unset_bounds_stay_missing(self):
        """Test that omitted bounds are MISSING, not None."""
        constraints = Constraints.from_options()
        assert constraints.maximum is MISSING
        assert constraints.minimum is MISSING
        assert constraints.members is MISSING


class TestConstraintBuilder:
    """Tests for the fluent builder."""

    def test_builds_equivalent_constraints(self):
        """Test that the builder and option bag agree."""
        built = (ConstraintBuilder()
                 .lockable()
                 .not_nil()
                 .make_int()
                 .min(1)
                 .max(10)
                 .build())
        assert built == Constraints.from_options(
            lockable=True, not_nil=True, make_int=True, min=1, max=10
        )

    def test_builder_is_immutable(self):
        """Test that each call returns a new builder."""
        base = ConstraintBuilder().not_nil()
        strict = base.must_be(int)
        assert base.build().must_be == ()
        assert strict.build().must_be == (int,)

    def test_must_be_accumulates(self):
        """Test that repeated must_be calls extend the allowed types."""
        built = ConstraintBuilder().must_be(int).must_be(float, str).build()
        assert built.must_be == (int, float, str)

    def test_must_respond_to_accumulates(self):
        """Test that repeated must_respond_to calls extend the capabilities."""
        built = ConstraintBuilder().must_respond_to("read").must_respond_to("close").build()
        assert built.must_respond_to == ("read", "close")

    def test_second_coercion_rejected(self):
        """Test that the builder refuses a second, different coercion."""
        with pytest.raises(ValueError, match="At most one coercion"):
            ConstraintBuilder().make_int().make_float()

    def test_same_coercion_twice_allowed(self):
        """Test that repeating the same coercion is harmless."""
        built = ConstraintBuilder().make_bool().make("bool").build()
        assert built.coercion is Coercion.BOOL

    def test_within_and_convert(self):
        """Test membership and conversion builder methods."""
        built = ConstraintBuilder().within({"a", "b"}).convert(str.upper).build()
        assert built.apply("mode", "a") == "A"


class TestCoercions:
    """Tests for the make_* coercions."""

    @pytest.mark.parametrize("value, expected", [
        (None, {}),
        ([], {}),
        ((), {}),
        ({"a": 1}, {"a": 1}),
    ])
    def test_make_hash(self, value, expected):
        assert coerce("p", Coercion.HASH, value) == expected

    @pytest.mark.parametrize("value", [[1, 2], "text", 5])
    def test_make_hash_rejects(self, value):
        with pytest.raises(CoercionError, match="'p' cannot be coerced to hash"):
            coerce("p", Coercion.HASH, value)

    def test_make_hash_returns_copy(self):
        """Test that a coerced mapping is a new dict."""
        source = {"a": 1}
        result = coerce("p", Coercion.HASH, source)
        assert result == source
        assert result is not source

    @pytest.mark.parametrize("value, expected", [
        (None, []),
        ([1, 2], [1, 2]),
        ((1, 2), [1, 2]),
        ({"a": 1}, [("a", 1)]),
        ("abc", ["abc"]),
        (b"abc", [b"abc"]),
        (7, [7]),
    ])
    def test_make_array(self, value, expected):
        assert coerce("p", Coercion.ARRAY, value) == expected

    @pytest.mark.parametrize("value, expected", [
        (None, ""),
        (12, "12"),
        (b"bytes", "bytes"),
        ("same", "same"),
    ])
    def test_make_string(self, value, expected):
        assert coerce("p", Coercion.STRING, value) == expected

    @pytest.mark.parametrize("value, expected", [
        (10, 10),
        ("10", 10),
        (" 42 ", 42),
        ("-3", -3),
        (3.9, 3),
        (-3.9, -3),
        (Fraction(15, 2), 7),
    ])
    def test_make_int(self, value, expected):
        assert coerce("p", Coercion.INT, value) == expected

    @pytest.mark.parametrize("value", ["abc", "3.5", None, True, math.inf, math.nan, [1]])
    def test_make_int_rejects(self, value):
        with pytest.raises(CoercionError, match="cannot be coerced to int"):
            coerce("p", Coercion.INT, value)

    @pytest.mark.parametrize("value, expected", [
        (1, 1.0),
        ("2.5", 2.5),
        (Decimal("0.25"), 0.25),
    ])
    def test_make_float(self, value, expected):
        assert coerce("p", Coercion.FLOAT, value) == expected

    @pytest.mark.parametrize("value", ["abc", None, False, {}])
    def test_make_float_rejects(self, value):
        with pytest.raises(CoercionError, match="cannot be coerced to float"):
            coerce("p", Coercion.FLOAT, value)

    @pytest.mark.parametrize("value, expected", [
        ("true", True),
        ("Yes", True),
        ("ON", True),
        ("1", True),
        ("false", False),
        ("no", False),
        ("off", False),
        ("0", False),
        ("", False),
        (1, True),
        (0, False),
        (None, False),
        ([], False),
        ([0], True),
    ])
    def test_make_bool(self, value, expected):
        assert coerce("p", Coercion.BOOL, value) is expected

    def test_make_bool_rejects_unknown_literal(self):
        with pytest.raises(CoercionError, match="not a boolean literal"):
            coerce("p", Coercion.BOOL, "maybe")

    def test_coercion_error_chains_cause(self):
        """Test that the original exception is kept as __cause__."""
        with pytest.raises(CoercionError) as exc_info:
            coerce("p", Coercion.INT, "abc")
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert exc_info.value.parameter == "p"


class TestConstraintChain:
    """Tests for each check and their fixed order."""

    def test_lockable_only_when_locked(self):
        constraints = Constraints(lockable=True)
        assert constraints.apply("x", 1, locked=False) == 1
        with pytest.raises(LockedError, match="'x' cannot be set while the configuration is locked"):
            constraints.apply("x", 1, locked=True)

    def test_not_lockable_ignores_lock(self):
        assert Constraints().apply("x", 1, locked=True) == 1

    def test_not_nil(self):
        with pytest.raises(NullNotAllowedError, match="'x' cannot be None"):
            Constraints(not_nil=True).apply("x", None)
        assert Constraints(not_nil=True).apply("x", 0) == 0

    @pytest.mark.parametrize("value", [None, "", [], {}, ()])
    def test_not_empty_rejects(self, value):
        with pytest.raises(EmptyNotAllowedError, match="'x' cannot be empty"):
            Constraints(not_empty=True).apply("x", value)

    @pytest.mark.parametrize("value", ["a", [0], 0, 3.5])
    def test_not_empty_accepts(self, value):
        """Test that sized non-empty values and unsized values pass."""
        assert Constraints(not_empty=True).apply("x", value) == value

    def test_must_be_accepts_subclasses(self):
        """Test that must_be is an isinstance check."""
        class Base:
            pass

        class Child(Base):
            pass

        child = Child()
        assert Constraints(must_be=Base).apply("x", child) is child

    def test_must_be_rejects_float_for_int(self):
        with pytest.raises(TypeConstraintError, match=r"Wrong type \(float\) for 'x' value; expected int"):
            Constraints(must_be=int).apply("x", 1.5)

    def test_must_be_multiple_types(self):
        constraints = Constraints(must_be=(int, str))
        assert constraints.apply("x", "a") == "a"
        assert constraints.apply("x", 3) == 3

    def test_must_respond_to(self):
        constraints = Constraints(must_respond_to=("read", "close"))
        with pytest.raises(CapabilityMissingError, match="'x' must respond to 'read'") as exc_info:
            constraints.apply("x", 42)
        assert exc_info.value.capability == "read"

    def test_max_and_min_inclusive(self):
        constraints = Constraints(minimum=1, maximum=3)
        assert constraints.apply("x", 1) == 1
        assert constraints.apply("x", 3) == 3
        with pytest.raises(RangeError, match="must be not more than 3"):
            constraints.apply("x", 4)
        with pytest.raises(RangeError, match="must be not less than 1"):
            constraints.apply("x", 0)

    def test_incomparable_bound(self):
        """Test that comparing across types is a type error, not a range error."""
        with pytest.raises(TypeConstraintError, match="cannot be compared"):
            Constraints(maximum=10).apply("x", "eleven")

    def test_in(self):
        constraints = Constraints(members=[1, 2, 3])
        assert constraints.apply("x", 2) == 2
        with pytest.raises(RangeError, match="'x' is out of range: 4"):
            constraints.apply("x", 4)

    def test_in_with_unhashable_value(self):
        """Test that an unhashable value is simply not a member of a set."""
        with pytest.raises(RangeError, match="out of range"):
            Constraints(members={1, 2}).apply("x", [1])

    def test_in_range(self):
        constraints = Constraints(members=range(1, 5))
        assert constraints.apply("x", 4) == 4
        with pytest.raises(RangeError):
            constraints.apply("x", 5)

    def test_convert_callable(self):
        assert Constraints(convert=lambda v: v * 2).apply("x", 21) == 42

    def test_convert_host_method(self):
        class Host:
            def normalize(self, value):
                return value.strip().lower()

        constraints = Constraints(convert="normalize")
        assert constraints.apply("x", "  MiXeD ", host=Host()) == "mixed"

    def test_convert_host_method_without_host(self):
        with pytest.raises(HostMissingError, match="host method 'normalize'"):
            Constraints(convert="normalize").apply("x", "value")

    def test_lock_checked_before_nil(self):
        """Test that lockable is evaluated before not_nil."""
        constraints = Constraints(lockable=True, not_nil=True)
        with pytest.raises(LockedError):
            constraints.apply("x", None, locked=True)

    def test_nil_checked_before_type(self):
        """Test that not_nil is evaluated before must_be."""
        constraints = Constraints(not_nil=True, must_be=int)
        with pytest.raises(NullNotAllowedError):
            constraints.apply("x", None)

    def test_type_checked_before_coercion(self):
        """Test that must_be sees the original value, not the coerced one."""
        constraints = Constraints(must_be=str, coercion=Coercion.INT)
        assert constraints.apply("x", "5") == 5
        with pytest.raises(TypeConstraintError):
            constraints.apply("x", 5.0)

    def test_bounds_see_coerced_value(self):
        """Test that make_int + min validates the coerced integer."""
        constraints = Constraints.from_options(make_int=True, min=5)
        assert constraints.apply("x", "10") == 10
        with pytest.raises(RangeError, match="not less than 5"):
            constraints.apply("x", "3")

    def test_coercion_fails_before_bounds(self):
        """Test that a non-coercible value fails at the coercion stage."""
        constraints = Constraints.from_options(make_int=True, min=5)
        with pytest.raises(CoercionError):
            constraints.apply("x", "abc")

    def test_max_checked_before_min(self):
        """Test that an inverted bound pair reports max first."""
        constraints = Constraints(minimum=10, maximum=0)
        with pytest.raises(RangeError, match="not more than 0"):
            constraints.apply("x", 5)

    def test_membership_checked_before_convert(self):
        """Test that 'in' sees the pre-convert value."""
        constraints = Constraints(members=["a", "b"], convert=str.upper)
        assert constraints.apply("x", "a") == "A"
        with pytest.raises(RangeError):
            constraints.apply("x", "A")

    @given(value=st.integers(min_value=-1000, max_value=1000))
    def test_make_int_min_property(self, value):
        """Property: make_int + min accepts exactly the strings at or above the bound."""
        constraints = Constraints.from_options(make_int=True, min=5)
        if value >= 5:
            assert constraints.apply("x", str(value)) == value
        else:
            with pytest.raises(RangeError):
                constraints.apply("x", str(value))

    @given(value=st.integers(min_value=-10, max_value=10))
    def test_membership_property(self, value):
        """Property: 'in' accepts members and rejects everything else."""
        constraints = Constraints(members=[1, 2, 3])
        if value in (1, 2, 3):
            assert constraints.apply("x", value) == value
        else:
            with pytest.raises(RangeError):
                constraints.apply("x", value)
