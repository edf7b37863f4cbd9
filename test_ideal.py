"""Tests for ideal library."""

import pytest
from sympy import IndexedBase, Matrix, eye, expand, symbols
from sympy.polys.orderings import grevlex

from normalform import ShapeError
from ideal import (
    WeightOrder, block_diagonal, lex_matrix, grlex_matrix, grevlex_matrix,
    elimination_matrix, multi_indices, monomials, general_polynomial,
    ideal_sum, ideal_product, ideal_intersection, ideal_quotient, saturation,
    split_ideal, homogenize, dehomogenize, initial_form, standard_basis,
    series_reduce, tangent_cone,
)


x, y, z = symbols('x y z')
a = IndexedBase('a')


class TestMultiIndices:
    def test_two_variables(self):
        assert multi_indices(2, 2) == [(2, 0), (1, 1), (0, 2)]

    def test_zero_order(self):
        assert multi_indices(0, 3) == [(0, 0, 0)]

    def test_count(self):
        assert len(multi_indices(3, 3)) == 10

    def test_monomials(self):
        assert monomials(2, [x, y]) == [x**2, x * y, y**2]


class TestGeneralPolynomial:
    def test_single_variable(self):
        p = general_polynomial('a', x, 2)
        assert expand(p - (a[0] + a[1] * x + a[2] * x**2)) == 0

    def test_total_degree(self):
        p = general_polynomial('a', [x, y], 1)
        assert expand(p - (a[0, 0] + a[1, 0] * x + a[0, 1] * y)) == 0

    def test_homogeneous(self):
        p = general_polynomial('a', [x, y], 2, homogeneous=True)
        assert expand(p - (a[2, 0] * x**2 + a[1, 1] * x * y + a[0, 2] * y**2)) == 0

    def test_per_variable_degrees(self):
        p = general_polynomial('a', [x, y], [1, 1])
        expected = a[0, 0] + a[0, 1] * y + a[1, 0] * x + a[1, 1] * x * y
        assert expand(p - expected) == 0

    def test_degree_shape(self):
        with pytest.raises(ShapeError):
            general_polynomial('a', [x, y], [1])


class TestIdealArithmetic:
    def test_sum(self):
        assert ideal_sum([x], [y], [x, y]) == [x, y]

    def test_product(self):
        assert ideal_product([x], [y], [x, y]) == [x * y]

    def test_intersection(self):
        assert ideal_intersection([x], [y], [x, y]) == [x * y]

    def test_quotient(self):
        assert ideal_quotient([x * y], [y], [x, y]) == [x]

    def test_saturation(self):
        assert saturation([x**2 * y], x, [x, y]) == [y]

    def test_saturation_by_list(self):
        assert saturation([x**2 * y], [x, y], [x, y]) == [1]

    def test_split(self):
        assert split_ideal([x * y], x, [x, y]) == [[y], [x]]

    def test_no_split(self):
        assert split_ideal([y], x, [x, y]) == [[y]]


class TestLocalRing:
    def test_homogenize(self):
        assert homogenize(x**2 + x, [x], z) == x**2 + x * z
        assert homogenize([x, 0], [x], z) == [x, 0]

    def test_dehomogenize(self):
        assert dehomogenize(x**2 + x * z, z) == x**2 + x

    def test_initial_form(self):
        assert initial_form(x**2 + x**3 + x * y**2, [x, y]) == x**2

    def test_standard_basis(self):
        assert standard_basis([x - x**2], [x]) == [x - x**2]

    def test_series_reduce(self):
        quotients, remainder = series_reduce(x**2 - x**3, [x - x**2], [x])
        assert quotients == [x]
        assert remainder == 0

    def test_tangent_cone_smooth(self):
        assert tangent_cone([x - x**2], [x]) == [x]

    @pytest.mark.parametrize('order', ['lex', 'grevlex'])
    def test_tangent_cone_node(self, order):
        assert tangent_cone(y**2 - x**2 - x**3, [x, y], order=order) == [x**2 - y**2]


class TestWeightMatrices:
    def test_grevlex(self):
        assert grevlex_matrix(3) == Matrix([[1, 1, 1], [0, 0, -1], [0, -1, 0]])

    def test_grlex(self):
        assert grlex_matrix(3) == Matrix([[1, 1, 1], [1, 0, 0], [0, 1, 0]])

    def test_lex(self):
        assert lex_matrix(2) == eye(2)

    def test_block_diagonal(self):
        expected = Matrix([[1, 0, 0], [0, 1, 1], [0, 0, -1]])
        assert block_diagonal(Matrix([[1]]), grevlex_matrix(2)) == expected

    def test_elimination(self):
        expected = Matrix([[1, 1, 0, 0], [0, 0, 1, 1], [0, 0, 0, -1], [0, -1, 0, 0]])
        assert elimination_matrix(2, 4) == expected

    def test_elimination_range(self):
        with pytest.raises(ValueError):
            elimination_matrix(3, 3)


class TestWeightOrder:
    def test_matches_grevlex(self):
        order = WeightOrder(grevlex_matrix(3))
        alphas = multi_indices(2, 3) + multi_indices(3, 3)
        assert sorted(alphas, key=order) == sorted(alphas, key=grevlex)

    def test_global(self):
        assert WeightOrder(grevlex_matrix(2)).is_global
        assert not WeightOrder([[1, 0], [0, -1]]).is_global

    def test_equality(self):
        assert WeightOrder(eye(2)) == WeightOrder([[1, 0], [0, 1]])
        assert hash(WeightOrder(eye(2))) == hash(WeightOrder([[1, 0], [0, 1]]))
        assert WeightOrder(eye(2)) != WeightOrder(grlex_matrix(2))

    def test_not_square(self):
        with pytest.raises(ShapeError):
            WeightOrder([[1, 0, 0], [0, 1, 0]])

    def test_singular(self):
        with pytest.raises(ValueError):
            WeightOrder([[1, 1], [1, 1]])

    def test_as_groebner_order(self):
        assert ideal_sum([x + y**2], [y], [x, y], order=grlex_matrix(2)) == [x, y]

    def test_wrong_size(self):
        with pytest.raises(ShapeError):
            ideal_sum([x], [y], [x, y], order=eye(3))
