"""
ideal - Polynomial ideal operations for normal form computations
MIT License

Groebner-basis constructions on ideals of k[x1, ..., xn]: sums, products,
intersections, quotients, saturations, standard bases of local rings and
tangent cones. Monomial orders are given by name ('lex', 'grlex',
'grevlex'), by a SymPy MonomialOrder, or by an n x n weight matrix.
Shape errors and the grading helper homogeneous_part come from normalform.

Examples:
    >>> from sympy import symbols
    >>> from ideal import ideal_intersection
    >>> x, y = symbols('x y')
    >>> ideal_intersection([x], [y], [x, y])
    [x*y]
"""

import itertools
import logging
from typing import List, Sequence, Tuple, Union

from sympy import (
    Dummy, Expr, IndexedBase, Matrix, Mul, Poly, diag, div, expand, eye,
    groebner, reduced, sympify
)
from sympy.matrices import MatrixBase
from sympy.polys.orderings import MonomialOrder, ProductOrder, lex, monomial_key

from normalform import ShapeError, homogeneous_part

logger = logging.getLogger(__name__)


# =============================================================================
# Monomial orders
# =============================================================================

class WeightOrder(MonomialOrder):
    """
    Monomial order given by a square weight matrix.

    Monomials are compared by the vectors W.alpha, lexicographically. Any
    non-singular integer matrix whose columns start with a positive entry
    defines a global order usable by groebner.
    """
    alias = 'weight'

    def __init__(self, matrix):
        rows = [tuple(int(entry) for entry in row) for row in Matrix(matrix).tolist()]
        for row in rows:
            if len(row) != len(rows):
                raise ShapeError(len(row), len(rows), "weight row")
        if rows and Matrix(rows).det() == 0:
            raise ValueError(f"Weight matrix {rows} is singular")
        self.rows = tuple(rows)

    def __call__(self, monomial):
        return tuple(sum(w * e for w, e in zip(row, monomial)) for row in self.rows)

    @property
    def is_global(self) -> bool:
        for column in zip(*self.rows):
            leading = next((w for w in column if w != 0), 0)
            if leading <= 0:
                return False
        return True

    def __repr__(self):
        return f"WeightOrder({[list(row) for row in self.rows]})"

    def __str__(self):
        return repr(self)

    def __eq__(self, other):
        return isinstance(other, WeightOrder) and self.rows == other.rows

    def __hash__(self):
        return hash((self.__class__, self.rows))


def block_diagonal(*matrices) -> Matrix:
    """Block diagonal matrix with the given matrices on its diagonal."""
    return diag(*[Matrix(m) for m in matrices])


def lex_matrix(n: int) -> Matrix:
    return eye(n)


def grlex_matrix(n: int) -> Matrix:
    """Weight matrix of the graded lexicographic order."""
    return Matrix(n, n, lambda i, j: 1 if i == 0 or i - j == 1 else 0)


def grevlex_matrix(n: int) -> Matrix:
    """Weight matrix of the graded reverse lexicographic order."""
    def entry(i, j):
        if i == 0:
            return 1
        return -1 if i + j == n else 0
    return Matrix(n, n, entry)


def elimination_matrix(k: int, n: int) -> Matrix:
    """
    Weight matrix of the k-th elimination order on n variables.

    Monomials in the first k variables dominate; ties are broken with
    grevlex on the remaining n - k variables, then on the first k.
    """
    if not 0 < k < n:
        raise ValueError(f"Elimination order needs 0 < k < n, got k = {k}, n = {n}")
    blocks = block_diagonal(grevlex_matrix(k), grevlex_matrix(n - k))
    rows = [0] + list(range(k, n)) + list(range(1, k))
    return blocks.extract(rows, list(range(n)))


def _resolve_order(order, n: int) -> MonomialOrder:
    if isinstance(order, (MatrixBase, list, tuple)):
        weight = WeightOrder(order)
        if len(weight.rows) != n:
            raise ShapeError(len(weight.rows), n, "order")
        return weight
    return monomial_key(order)


def _head(monomial):
    return monomial[:1]


def _tail(monomial):
    return monomial[1:]


def _eliminating(order, n: int) -> ProductOrder:
    """Order on (t, x1..xn) eliminating t, refined by `order` on x."""
    return ProductOrder((lex, _head), (_resolve_order(order, n), _tail))


def _eliminate(F, t, vars, order) -> List[Expr]:
    basis = groebner(F, t, *vars, order=_eliminating(order, len(vars)))
    return [g for g in basis.exprs if t not in g.free_symbols]


# =============================================================================
# Monomials and general polynomials
# =============================================================================

def multi_indices(order: int, n: int) -> List[Tuple[int, ...]]:
    """
    All n-dimensional multi-indices of total order `order`.

    Ordered with the last index ascending in the outermost loop:
    multi_indices(2, 2) == [(2, 0), (1, 1), (0, 2)].
    """
    if n == 1:
        return [(order,)]
    if order == 0:
        return [(0,) * n]
    return [alpha + (i,)
            for i in range(order + 1)
            for alpha in multi_indices(order - i, n - 1)]


def monomials(order: int, vars) -> List[Expr]:
    """All monomials of degree `order` in vars."""
    return [Mul(*[v**e for v, e in zip(vars, alpha)])
            for alpha in multi_indices(order, len(vars))]


def general_polynomial(name: str, vars, degree: Union[int, Sequence[int]],
                       homogeneous: bool = False) -> Expr:
    """
    General polynomial with indexed symbolic coefficients.

    Args:
        name: Name of the IndexedBase holding the coefficients; the
            coefficient of x^alpha is name[alpha]
        vars: A symbol, or a sequence of symbols
        degree: Total degree, or a list of per-variable degrees
        homogeneous: Keep only terms of total degree `degree`

    Returns:
        The expanded polynomial
    """
    A = IndexedBase(name)
    if not isinstance(vars, (list, tuple)):
        return sum(A[k] * vars**k for k in range(degree + 1))
    if isinstance(degree, (list, tuple)):
        if len(degree) != len(vars):
            raise ShapeError(len(degree), len(vars), "degree")
        exponents = itertools.product(*[range(d + 1) for d in degree])
    elif homogeneous:
        exponents = multi_indices(degree, len(vars))
    else:
        exponents = [alpha for d in range(degree + 1)
                     for alpha in multi_indices(d, len(vars))]
    return expand(sum(A[alpha] * Mul(*[v**e for v, e in zip(vars, alpha)])
                      for alpha in exponents))


# =============================================================================
# Ideal arithmetic
# =============================================================================

def ideal_sum(F, G, vars, order='lex') -> List[Expr]:
    """Groebner basis of <F> + <G>."""
    return list(groebner(list(F) + list(G), *vars,
                         order=_resolve_order(order, len(vars))).exprs)


def ideal_product(F, G, vars, order='lex') -> List[Expr]:
    """Groebner basis of <F><G>."""
    products = [f * g for f in F for g in G]
    return list(groebner(products, *vars, order=_resolve_order(order, len(vars))).exprs)


def ideal_intersection(F, G, vars, order='lex') -> List[Expr]:
    """Groebner basis of the intersection of <F> and <G>."""
    t = Dummy('t')
    return _eliminate([t * f for f in F] + [(1 - t) * g for g in G], t, vars, order)


def ideal_quotient(F, G, vars, order='lex') -> List[Expr]:
    """Groebner basis of the ideal quotient <F> : <G>."""
    G = list(G)
    if not G:
        raise ValueError("Quotient by the empty ideal")
    quotients = []
    for g in G:
        common = ideal_intersection(F, [g], vars, order)
        quotients.append([div(h, g, *vars)[0] for h in common])
    result = quotients[0]
    for basis in quotients[1:]:
        result = ideal_intersection(result, basis, vars, order)
    return result


def saturation(F, G, vars, order='lex') -> List[Expr]:
    """
    Saturation of <F> with respect to a polynomial or an ideal.

    G may be a single polynomial g, giving <F> : g^infinity, or a list of
    polynomials, saturated by one after the other.
    """
    if isinstance(G, (list, tuple)):
        result = list(F)
        for g in G:
            result = saturation(result, g, vars, order)
        return result
    t = Dummy('t')
    return _eliminate(list(F) + [1 - t * G], t, vars, order)


def split_ideal(F, g, vars) -> List[List[Expr]]:
    """
    Split <F> along the hypersurface g = 0.

    Returns [F] if saturating by g changes nothing, otherwise the pair
    [<F> : g^infinity, <F> + <g>].
    """
    F = list(F)
    satideal = saturation(F, g, vars)
    if {expand(f) for f in satideal} <= {expand(f) for f in F}:
        return [F]
    logger.debug(f"Splitting ideal {F} along {g}")
    return [satideal, list(groebner(F + [g], *vars).exprs)]


# =============================================================================
# Local rings
# =============================================================================

def homogenize(F, vars, z):
    """Homogenize a polynomial, or each of a list, with the variable z."""
    if isinstance(F, (list, tuple)):
        return [homogenize(f, vars, z) for f in F]
    F = sympify(F)
    if F == 0:
        return F
    degree = Poly(F, *vars).total_degree()
    return expand(z**degree * F.subs({v: v / z for v in vars}, simultaneous=True))


def dehomogenize(F, z):
    """Set the homogenizing variable z to 1."""
    if isinstance(F, (list, tuple)):
        return [dehomogenize(f, z) for f in F]
    return expand(sympify(F).subs(z, 1))


def initial_form(F, vars):
    """Lowest-degree homogeneous part of a polynomial, or of each of a list."""
    if isinstance(F, (list, tuple)):
        return [initial_form(f, vars) for f in F]
    F = sympify(F)
    if F == 0:
        return F
    lowest = min(sum(m) for m, c in Poly(F, *vars).terms() if c != 0)
    return homogeneous_part(F, vars, lowest)


def standard_basis(F, vars, order='lex') -> List[Expr]:
    """Standard basis of <F> in the local ring at the origin."""
    z = Dummy('z')
    basis = groebner(homogenize(list(F), vars, z), z, *vars,
                     order=_eliminating(order, len(vars)))
    return dehomogenize(list(basis.exprs), z)


def series_reduce(f, F, vars, order='lex'):
    """
    Reduce f modulo the standard basis F.

    Returns (quotients, remainder) with sum(q*g) + remainder == f after
    dehomogenization. A list f gives a list of such pairs.
    """
    if isinstance(f, (list, tuple)):
        return [series_reduce(g, F, vars, order) for g in f]
    z = Dummy('z')
    quotients, remainder = reduced(
        homogenize(f, vars, z), homogenize(list(F), vars, z), z, *vars,
        order=_eliminating(order, len(vars)),
    )
    return dehomogenize(list(quotients), z), dehomogenize(remainder, z)


def tangent_cone(F, vars, order='lex') -> List[Expr]:
    """Groebner basis of the tangent cone of <F> at the origin."""
    if not isinstance(F, (list, tuple)):
        F = [F]
    forms = initial_form(standard_basis(F, vars, order), vars)
    return list(groebner(forms, *vars, order=_resolve_order(order, len(vars))).exprs)


__all__ = [
    'WeightOrder',
    'block_diagonal',
    'lex_matrix',
    'grlex_matrix',
    'grevlex_matrix',
    'elimination_matrix',
    'multi_indices',
    'monomials',
    'general_polynomial',
    'ideal_sum',
    'ideal_product',
    'ideal_intersection',
    'ideal_quotient',
    'saturation',
    'split_ideal',
    'homogenize',
    'dehomogenize',
    'initial_form',
    'standard_basis',
    'series_reduce',
    'tangent_cone',
]
