"""Tests for easy module."""

import pytest
from sympy import I, Symbol, symbols
from easy import FieldParser, VectorField, bracket, flow, normalize
from normalform import NormalFormError, UnrecognizedOptionError


x, y, t = symbols('x y t')


class TestFieldParser:
    def test_parse_hopf(self):
        parser = FieldParser()
        result = parser.parse_field("-y + x^2*y, x + x*y^2")
        assert result['field'] == [-y + x**2 * y, x + x * y**2]
        assert result['vars'] == [x, y]

    def test_implicit_multiplication(self):
        parser = FieldParser()
        result = parser.parse_field("2xy + x^2")
        assert result['field'] == [2 * x * y + x**2]

    def test_brackets_and_semicolons(self):
        parser = FieldParser()
        result = parser.parse_field("[i*x + x^2*y; -i*y]")
        assert result['field'] == [I * x + x**2 * y, -I * y]

    def test_explicit_variables(self):
        parser = FieldParser()
        result = parser.parse_field("x, y", "y x")
        assert result['vars'] == [y, x]

    def test_params(self):
        parser = FieldParser()
        result = parser.parse_field("mu*x + x^2", "x", params="mu")
        assert result['field'] == [Symbol('mu') * x + x**2]

    def test_bad_component(self):
        parser = FieldParser()
        with pytest.raises(ValueError) as info:
            parser.parse_field("x + ), y")
        assert "x + )" in str(info.value)

    def test_empty_component(self):
        parser = FieldParser()
        with pytest.raises(ValueError):
            parser.parse_field("x,, y")

    def test_detects_implicit_products(self):
        parser = FieldParser()
        result = parser.parse_field("2xy, y")
        assert result['vars'] == [x, y]


class TestNormalize:
    def test_scalar(self):
        result = normalize("x + x^2")
        assert result['normal_form'] == ['x']
        assert result['generator'] == ['-x**2']
        assert result['resonant_terms'] == []

    def test_hopf(self):
        result = normalize("-y + x^2*y, x + x*y^2", form="semisimple", diagonalize=True)
        assert result['vars'] == ['x1', 'y1']
        assert set(result['eigenvalues_expr']) == {I, -I}
        for k, term in result['resonant_terms']:
            assert k in (0, 1)

    def test_bad_form(self):
        with pytest.raises(UnrecognizedOptionError):
            normalize("x + x^2", form="bogus")


class TestBracket:
    def test_commuting(self):
        result = bracket("x, y", "-y, x")
        assert result['bracket_expr'] == [0, 0]
        assert result['commute']

    def test_scalar(self):
        result = bracket("x", "x^2")
        assert result['bracket_expr'] == [-x**2]
        assert not result['commute']


class TestFlow:
    def test_quadratic(self):
        result = flow("x^2", order=5)
        expected = x + t * x**2 + t**2 * x**3 + t**3 * x**4 + t**4 * x**5
        assert result['flow_expr'] == [expected]
        assert result['vars'] == ['x']

    def test_linear_part_rejected(self):
        with pytest.raises(NormalFormError):
            flow("x + x^2")


class TestVectorFieldClass:
    def test_normal_form(self):
        X = VectorField("x + x^2")
        assert X.normal_form() == [x]
        assert X.generator() == [-x**2]
        assert X.eigenvalues() == [1]

    def test_linearizable(self):
        assert VectorField("x + x^2").is_linearizable()
        assert not VectorField("x^2").is_linearizable()

    def test_explain(self):
        X = VectorField("x + x^2")
        text = X.explain()
        assert "Normal form" in text
        assert "Linearizable to order 3: Yes" in text

    def test_repr(self):
        assert repr(VectorField("x + x^2")) == "VectorField('x + x^2')"
