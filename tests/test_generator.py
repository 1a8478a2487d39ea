"""Tests for the DataGenerator contract."""

import pytest

from dataforge import DataGenerator, GenerationContext, ParameterTypeError


class EchoGenerator(DataGenerator[dict]):
    """Generator exposing parameter coercion for tests."""

    name = "echo"
    supported_parameters = ("length", "flag", "ratio")

    def generate(self, context: GenerationContext) -> dict:
        return {
            "length": self._param(context, "length", 3, int),
            "flag": self._param(context, "flag", False, bool),
            "ratio": self._param(context, "ratio", 0.5, float),
        }


class UnnamedGenerator(DataGenerator[int]):
    def generate(self, context: GenerationContext) -> int:
        return self._rng(context).randrange(1000)


class TestContract:
    """Test names and supported parameters."""

    def test_declared_name(self):
        """Test declared name is returned."""
        assert EchoGenerator().get_name() == "echo"

    def test_name_is_optional(self):
        """Test generators may omit a name."""
        assert UnnamedGenerator().get_name() is None

    def test_supported_parameters(self):
        """Test supported parameters as a list."""
        assert EchoGenerator().get_supported_parameters() == ["length", "flag", "ratio"]
        assert UnnamedGenerator().get_supported_parameters() == []

    def test_abstract(self):
        """Test the contract cannot be instantiated directly."""
        with pytest.raises(TypeError):
            DataGenerator()  # type: ignore[abstract]

    def test_reset_is_noop_by_default(self):
        """Test default reset does nothing."""
        UnnamedGenerator().reset()

    def test_repr(self):
        """Test repr includes the name."""
        assert "echo" in repr(EchoGenerator())


class TestParameterCoercion:
    """Test per-generator parameter coercion."""

    def test_defaults(self):
        """Test defaults when nothing is set."""
        assert EchoGenerator().generate(GenerationContext()) == {
            "length": 3,
            "flag": False,
            "ratio": 0.5,
        }

    def test_string_values_are_coerced(self):
        """Test string values coerced to the expected types."""
        context = GenerationContext(parameters={"length": "7", "flag": "yes", "ratio": "0.25"})
        assert EchoGenerator().generate(context) == {"length": 7, "flag": True, "ratio": 0.25}

    def test_integral_float_to_int(self):
        """Test integral floats are accepted for int parameters."""
        context = GenerationContext(parameters={"length": 4.0})
        assert EchoGenerator().generate(context)["length"] == 4

    def test_bad_int(self):
        """Test uncoercible value raises ParameterTypeError."""
        context = GenerationContext(parameters={"length": "abc"})
        with pytest.raises(ParameterTypeError) as exc_info:
            EchoGenerator().generate(context)

        assert exc_info.value.context["parameter"] == "length"
        assert exc_info.value.context["expected"] == "int"

    def test_fractional_float_for_int(self):
        """Test fractional floats are rejected for int parameters."""
        context = GenerationContext(parameters={"length": 2.5})
        with pytest.raises(ParameterTypeError):
            EchoGenerator().generate(context)

    def test_bad_bool(self):
        """Test unknown boolean strings are rejected."""
        context = GenerationContext(parameters={"flag": "maybe"})
        with pytest.raises(ParameterTypeError):
            EchoGenerator().generate(context)

    def test_parameter_type_error_is_type_error(self):
        """Test the error also derives from TypeError."""
        context = GenerationContext(parameters={"ratio": object()})
        with pytest.raises(TypeError):
            EchoGenerator().generate(context)


class TestRandomSource:
    """Test choice of random source."""

    def test_seeded_context_is_reproducible(self):
        """Test generators draw from a seeded context."""
        generator = UnnamedGenerator()
        first = [generator.generate(GenerationContext(seed=3)) for _ in range(3)]
        second = [UnnamedGenerator().generate(GenerationContext(seed=3)) for _ in range(3)]
        assert first == second

    def test_unseeded_uses_own_random(self):
        """Test unseeded calls use the generator's own random source."""
        generator = UnnamedGenerator()
        context = GenerationContext()
        assert generator._rng(context) is generator._rng(context)
        assert generator._rng(context) is not context.random
