"""Tests for heightmap template parsing."""

import pytest
from py_terrain.config.heightmap_templates import TEMPLATES, get_template, list_templates
from py_terrain.core.exceptions import ConfigurationError, TemplateError
from py_terrain.core.heightmap_template import (
    ALL_HEIGHTS, LAND_HEIGHTS, AddStep, Fixed, HillStep, InvertAxes, InvertStep,
    MultiplyStep, SmoothStep, Span, StraitDirection, StraitStep, parse_step,
    parse_template, resolve_count, resolve_point
)
from py_terrain.core.alea_prng import AleaPRNG


class TestParseTemplate:
    """Test template text parsing."""

    def test_parse_lines(self):
        template = parse_template("""
            Hill 1 90-99 60-80 45-55
            Multiply 0.8 land 0 0
            Strait 2 vertical 0 0
            Smooth 100% 0 0 0
        """, name="sample")

        assert template.name == "sample"
        assert len(template) == 4
        hill = template.steps[0]
        assert isinstance(hill, HillStep)
        assert hill.count == Fixed(1)
        assert hill.height == Span(90, 99)
        assert template.steps[1] == MultiplyStep(value=0.8, band=LAND_HEIGHTS)
        assert template.steps[2] == StraitStep(width=Fixed(2), direction=StraitDirection.VERTICAL)
        assert template.steps[3] == SmoothStep(blend=1.0)

    def test_parse_pairs(self):
        template = parse_template([("Hill", "1 40-50 50-50 50-50"), ("Add", "-10 all")])
        assert isinstance(template.steps[0], HillStep)
        assert template.steps[1] == AddStep(value=-10, band=ALL_HEIGHTS)

    def test_smooth_forms(self):
        assert parse_step("Smooth", ["2"]) == SmoothStep(blend=0.5)
        assert parse_step("Smooth", ["50%"]) == SmoothStep(blend=0.5)
        assert parse_step("Smooth", []) == SmoothStep(blend=0.5)
        with pytest.raises(TemplateError):
            parse_step("Smooth", ["0.5"])

    def test_invert_aliases(self):
        assert parse_step("Invert", ["1", "horizontal"]) == InvertStep(1.0, InvertAxes.X)
        assert parse_step("Invert", ["0.5", "y"]) == InvertStep(0.5, InvertAxes.Y)
        assert parse_step("Invert", ["0.25"]).axes is InvertAxes.BOTH

    def test_empty_template(self):
        with pytest.raises(TemplateError):
            parse_template("   \n  ")

    def test_unknown_operation_reports_step(self):
        with pytest.raises(TemplateError) as exc_info:
            parse_template("Hill 1 40-50 50-50 50-50\nVolcano 1 2 3 4")
        assert exc_info.value.step_index == 1
        assert exc_info.value.operation == "Volcano"
        assert "step 1" in str(exc_info.value)

    @pytest.mark.parametrize("line", [
        "Hill 1 abc 50 50",
        "Hill -1 40 50 50",
        "Pit 1 50-40 50 50",
        "Hill 1 40 50",
        "Add 10 120-130",
        "Invert 2 x",
        "Strait 2 diagonal",
        "Mask",
    ])
    def test_malformed_steps(self, line):
        with pytest.raises(TemplateError) as exc_info:
            parse_template(line)
        assert exc_info.value.step_index == 0

    def test_template_error_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            parse_template("Hill x")

    def test_appended(self):
        template = parse_template("Hill 1 40 50 50")
        extended = template.appended(InvertStep(1.0, InvertAxes.X))
        assert len(extended) == 2
        assert len(template) == 1


class TestResolveParameters:
    """Test parameter resolution against the PRNG."""

    def test_fixed_count(self):
        prng = AleaPRNG("count")
        assert resolve_count(Fixed(3), prng) == 3
        assert prng.call_count == 0

    def test_fractional_count(self):
        prng = AleaPRNG("fraction")
        values = {resolve_count(Fixed(1.5), prng) for _ in range(100)}
        assert values == {1, 2}

    def test_span_count(self):
        prng = AleaPRNG("span")
        values = [resolve_count(Span(2, 4), prng) for _ in range(200)]
        assert min(values) >= 2
        assert max(values) <= 4

    def test_point(self):
        prng = AleaPRNG("point")
        assert resolve_point(Span(50, 50), 300, prng) == 150
        for _ in range(50):
            assert 30 <= resolve_point(Span(10, 20), 300, prng) <= 61


class TestBuiltInTemplates:
    """Test the template catalogue."""

    def test_all_templates_parse(self):
        assert len(list_templates()) == len(TEMPLATES) == 12
        for name in list_templates():
            template = get_template(name)
            assert template.name == name
            assert len(template) > 0

    def test_unknown_template(self):
        with pytest.raises(ConfigurationError):
            get_template("nonexistent")
