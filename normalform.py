"""
normalform - Lie-series normal forms of polynomial vector fields
MIT License

Reduces a system of ODEs x' = X(x) near an equilibrium at the origin to its
resonance normal form, order by order, and applies or inverts the resulting
near-identity changes of variables.

Examples:
    >>> from sympy import symbols
    >>> from normalform import normal_form, forward_action
    >>> x, = symbols('x')
    >>> Y, U = normal_form([x + x**2], [x], 3)
    >>> Y, U
    ([x], [-x**2])
    >>> forward_action([x], U, [x], 3)
    [x**3 - x**2 + x]
"""

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from sympy import (
    Add, Dummy, Expr, I, Matrix, Mul, Poly, S, Symbol,
    binomial, expand, factorial, series, sympify, zeros
)
from sympy.matrices import MatrixBase

logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================

class NormalFormError(ValueError):
    """Base class for errors raised by the normal form engine."""


class ShapeError(NormalFormError):
    """A vector field and a variable tuple have different lengths."""

    def __init__(self, field_length: int, vars_length: int, name: str = "X"):
        self.field_length = field_length
        self.vars_length = vars_length
        self.name = name
        super().__init__(
            f"Incommensurate dimensions: len({name}) = {field_length} "
            f"!= {vars_length} = len(vars)"
        )


class UnrecognizedOptionError(NormalFormError):
    """An option name or value that normal_form does not understand."""

    def __init__(self, name: str, value):
        self.name = name
        self.value = value
        super().__init__(f"Option {name} -> {value!r} unrecognized")


class SingularDivisorError(NormalFormError, ZeroDivisionError):
    """A term was classified non-resonant although its divisor is zero."""

    def __init__(self, term, component: int):
        self.term = term
        self.component = component
        super().__init__(
            f"Term {term} in component {component} was classified "
            f"non-resonant but its divisor is zero"
        )


def _check_shape(field, vars, name: str = "X"):
    if len(field) != len(vars):
        raise ShapeError(len(field), len(vars), name)


# =============================================================================
# Options
# =============================================================================

def _identity(value):
    return value


class FormStrategy(Enum):
    """Solver used for the homological equation at each order."""
    SEMISIMPLE = "semisimple"
    NILPOTENT = "nilpotent"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        name = value.strip().lower()
        # "resonance" is the historical name of the general Jordan solver
        if name == "resonance":
            return cls.NILPOTENT
        for member in cls:
            if member.value == name:
                return member
        return None


@dataclass(frozen=True)
class NormalFormOptions:
    """
    Settings for one normal_form call.

    Attributes:
        resonance_test: Applied to every divisor; the term is resonant when
            the result equals zero. The identity gives an exact test.
        form: FormStrategy (or its name). SEMISIMPLE assumes a diagonal
            linear part, NILPOTENT handles any Jordan normal form.
    """
    resonance_test: Callable = _identity
    form: FormStrategy = FormStrategy.NILPOTENT

    def __post_init__(self):
        if not callable(self.resonance_test):
            raise UnrecognizedOptionError("resonance_test", self.resonance_test)
        if not isinstance(self.form, FormStrategy):
            try:
                form = FormStrategy(self.form)
            except ValueError:
                raise UnrecognizedOptionError("form", self.form) from None
            object.__setattr__(self, "form", form)

    def replace(self, **overrides) -> 'NormalFormOptions':
        """Return a copy with some options changed."""
        names = {f.name for f in dataclasses.fields(self)}
        for name, value in overrides.items():
            if name not in names:
                raise UnrecognizedOptionError(name, value)
        return dataclasses.replace(self, **overrides)

    @property
    def solver(self) -> Callable:
        if self.form is FormStrategy.SEMISIMPLE:
            return semisimple_solve
        return nilpotent_solve


# =============================================================================
# Polynomial helpers
# =============================================================================

def _is_sequence(value) -> bool:
    return isinstance(value, (list, tuple, MatrixBase))


def _as_field(X) -> Matrix:
    return Matrix([sympify(c) for c in X])


def _expand(M: Matrix) -> Matrix:
    return M.applyfunc(expand)


def _to_list(M: Matrix) -> List[Expr]:
    return [expand(c) for c in M]


def _monomial(vars, exponent) -> Expr:
    return Mul(*[v**e for v, e in zip(vars, exponent)])


def graded_components(X, vars) -> Dict[int, Matrix]:
    """
    Split a vector field into its homogeneous components.

    Args:
        X: Sequence of polynomials in vars
        vars: Variable tuple

    Returns:
        dict mapping total degree d to the column Matrix holding the
        degree-d part of every component. Degrees with no terms are absent.
    """
    width = len(X)
    parts: Dict[int, Matrix] = {}
    for k, component in enumerate(X):
        for exponent, coeff in Poly(component, *vars).terms():
            if coeff == 0:
                continue
            part = parts.setdefault(sum(exponent), zeros(width, 1))
            part[k] += coeff * _monomial(vars, exponent)
    return parts


def homogeneous_part(expr, vars, degree: int):
    """Degree-`degree` part of a polynomial or of each entry of a sequence."""
    if _is_sequence(expr):
        return [homogeneous_part(e, vars, degree) for e in expr]
    poly = Poly(expr, *vars)
    return Add(*[c * _monomial(vars, m) for m, c in poly.terms()
                 if sum(m) == degree])


def grade(expr, vars, weights: Optional[Sequence[int]] = None) -> list:
    """
    List the (weighted) homogeneous parts of expr, from degree 0 upwards.

    With weights, variable vars[j] counts with degree weights[j]. For a
    sequence of polynomials every entry of the result is a list.
    """
    if weights is None:
        weights = (1,) * len(vars)
    if _is_sequence(expr):
        graded = [grade(e, vars, weights) for e in expr]
        top = max(len(g) for g in graded) if graded else 0
        return [[g[d] if d < len(g) else S.Zero for g in graded]
                for d in range(top)]
    terms = Poly(expr, *vars).terms()
    parts: Dict[int, Expr] = {}
    for m, c in terms:
        if c == 0:
            continue
        d = sum(w * e for w, e in zip(weights, m))
        parts[d] = parts.get(d, S.Zero) + c * _monomial(vars, m)
    if not parts:
        return [S.Zero]
    return [parts.get(d, S.Zero) for d in range(max(parts) + 1)]


def taylor(expr, vars, order: int):
    """
    Truncate expr to total degree <= order in vars.

    Polynomials are truncated term by term; other expressions are expanded
    with a series in a common scaling parameter.
    """
    if _is_sequence(expr):
        return [taylor(e, vars, order) for e in expr]
    expr = sympify(expr)
    if expr.is_polynomial(*vars):
        poly = Poly(expr, *vars)
        return Add(*[c * _monomial(vars, m) for m, c in poly.terms()
                     if sum(m) <= order])
    eps = Dummy('eps')
    scaled = expr.subs({v: eps * v for v in vars}, simultaneous=True)
    return expand(series(scaled, eps, 0, order + 1).removeO().subs(eps, 1))


def monomial_exponents(degree: int, n: int) -> List[Tuple[int, ...]]:
    """
    Exponents of all degree-`degree` monomials in n variables.

    Ordered lexicographically from the highest power of the first variable
    down, which is the order the Jordan solver visits them in.
    """
    if n == 0:
        return [()] if degree == 0 else []
    return [(degree - k,) + rest
            for k in range(degree + 1)
            for rest in monomial_exponents(k, n - 1)]


def eigenvalues(linear, vars) -> Tuple[Expr, ...]:
    """Diagonal of a linear vector field in Jordan or diagonal form."""
    return tuple(Poly(component, *vars).coeff_monomial(v)
                 for component, v in zip(linear, vars))


# =============================================================================
# Graded recursion tables
# =============================================================================

class GradedTable:
    """
    Memoized two-index family of vector fields owned by a single call.

    The rule maps a key (i, m) to the keys it depends on and a function
    combining their values. Lookups run on an explicit work stack, so the
    depth of a recurrence is bounded by memory only. Entries can also be
    assigned directly, which overrides the rule for that key.
    """

    def __init__(self, rule: Callable):
        self._rule = rule
        self._values: Dict[Tuple[int, int], Matrix] = {}

    def __contains__(self, key) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __setitem__(self, key, value):
        self._values[key] = value

    def __getitem__(self, key):
        if key in self._values:
            return self._values[key]

        stack = [key]
        pending = set()
        while stack:
            current = stack[-1]
            if current in self._values:
                stack.pop()
                continue
            deps, combine = self._rule(*current)
            missing = [d for d in deps if d not in self._values]
            if missing:
                if current in pending:
                    raise RuntimeError(f"Recurrence for {current} depends on itself")
                pending.add(current)
                stack.extend(missing)
                continue
            self._values[current] = combine([self._values[d] for d in deps])
            pending.discard(current)
            stack.pop()

        return self._values[key]


def _forward_rule(parts, width: int, pieces: Callable, contract: Callable) -> Callable:
    """F[i,0] = i! X_{i+1};  F[i,m] = F[i+1,m-1] + sum C(i,j) T(F[i-j,m-1], U_j)."""
    def rule(i, m):
        if m == 0:
            return [], lambda _: factorial(i) * parts.get(i + 1, zeros(width, 1))
        deps = [(i + 1, m - 1)] + [(i - j, m - 1) for j in range(i + 1)]

        def combine(values):
            total = values[0]
            for j, F in enumerate(values[1:]):
                total = total + binomial(i, j) * contract(F, pieces(j))
            return _expand(total)
        return deps, combine
    return rule


def _backward_rule(parts, width: int, pieces: Callable, contract: Callable,
                   sign: int = -1) -> Callable:
    """F[0,m] = m! X_{m+1};  F[i,m] = F[i-1,m+1] +- sum C(i-1,j) T(F[i-j-1,m], U_j)."""
    def rule(i, m):
        if i == 0:
            return [], lambda _: factorial(m) * parts.get(m + 1, zeros(width, 1))
        deps = [(i - 1, m + 1)] + [(i - j - 1, m) for j in range(i)]

        def combine(values):
            total = values[0]
            for j, F in enumerate(values[1:]):
                total = total + sign * binomial(i - 1, j) * contract(F, pieces(j))
            return _expand(total)
        return deps, combine
    return rule


def _forward_sum(table: GradedTable, width: int, order: int) -> Matrix:
    return sum((table[0, m] / factorial(m) for m in range(order)), zeros(width, 1))


def _backward_sum(table: GradedTable, width: int, order: int) -> Matrix:
    return sum((table[i, 0] / factorial(i) for i in range(order)), zeros(width, 1))


def _pieces(U, vars) -> Callable:
    """U_i = i! times the degree i+2 part of the generator U."""
    parts = graded_components(U, vars)
    n = len(vars)
    return lambda i: factorial(i) * parts.get(i + 2, zeros(n, 1))


# =============================================================================
# Lie bracket and divisors
# =============================================================================

def _bracket(X: Matrix, Y: Matrix, vars) -> Matrix:
    vars = list(vars)
    return _expand(X.jacobian(vars) * Y - Y.jacobian(vars) * X)


def lie_bracket(X, Y, vars) -> List[Expr]:
    """
    Lie bracket of two vector fields: [X, Y] = DX.Y - DY.X

    Args:
        X, Y: Sequences of expressions in vars, each of length len(vars)
        vars: Variable tuple

    Returns:
        The bracket as a list of expanded expressions
    """
    _check_shape(X, vars, "X")
    _check_shape(Y, vars, "Y")
    return _to_list(_bracket(_as_field(X), _as_field(Y), vars))


def divisor(exponent: Sequence[int], eigenvalues: Sequence, target: int) -> Expr:
    """Divisor of the monomial x^exponent in component `target`."""
    return expand(eigenvalues[target]
                  - Add(*[lam * a for lam, a in zip(eigenvalues, exponent)]))


def is_resonant(value, zero_test: Callable = _identity) -> bool:
    """True when zero_test maps the divisor to zero."""
    return zero_test(value) == 0


def chop(tolerance: float = 1e-10) -> Callable:
    """
    Resonance test treating numeric divisors smaller than tolerance as zero.

    Divisors that still contain symbols are returned unchanged, so they are
    resonant only when they vanish identically.
    """
    def test(value):
        value = sympify(value)
        if value.free_symbols:
            return value
        return S.Zero if abs(complex(value.evalf())) < tolerance else value
    return test


def _eliminate(term: Expr, exponent, eigs, component: int, zero_test: Callable):
    """Generator term removing `term`, or None when the term is resonant."""
    d = divisor(exponent, eigs, component)
    if is_resonant(d, zero_test):
        return None
    if d.is_zero:
        raise SingularDivisorError(term, component)
    return term / d


# =============================================================================
# Homological equation solvers
# =============================================================================

def semisimple_solve(linear: Matrix, eigs, forcing: Matrix, vars, degree: int,
                     zero_test: Callable = _identity) -> Tuple[Matrix, Matrix]:
    """
    Solve [A, Y] + G = F for a diagonal linear part A.

    Every monomial term of every component is either kept in the remainder
    G (resonant) or divided by its divisor into the generator Y.

    Returns:
        (remainder, generator) as column matrices
    """
    n = len(vars)
    remainder = zeros(n, 1)
    generator = zeros(n, 1)
    for k in range(n):
        for exponent, coeff in Poly(forcing[k], *vars).terms():
            if coeff == 0:
                continue
            term = coeff * _monomial(vars, exponent)
            solved = _eliminate(term, exponent, eigs, k, zero_test)
            if solved is None:
                remainder[k] += term
            else:
                generator[k] += solved
    return _expand(remainder), _expand(generator)


def nilpotent_solve(linear: Matrix, eigs, forcing: Matrix, vars, degree: int,
                    zero_test: Callable = _identity) -> Tuple[Matrix, Matrix]:
    """
    Solve [A, Y] + G = F for a linear part A in Jordan normal form.

    Components are resolved from the last variable to the first and, inside
    each component, monomials of degree `degree + 1` from the highest power
    of the first variable down. Each generator term immediately updates the
    residual with its bracket against A, since the superdiagonal of A
    couples it to later monomials and to earlier components.

    Returns:
        (remainder, generator) as column matrices
    """
    vars = list(vars)
    n = len(vars)
    columns = linear.jacobian(vars)
    residual = Matrix(forcing)
    generator = zeros(n, 1)
    exponents = monomial_exponents(degree + 1, n)

    for k in reversed(range(n)):
        for exponent in exponents:
            monomial = _monomial(vars, exponent)
            coeff = Poly(residual[k], *vars).coeff_monomial(monomial)
            if coeff == 0:
                continue
            solved = _eliminate(coeff * monomial, exponent, eigs, k, zero_test)
            if solved is None:
                continue
            generator[k] += solved
            residual = residual - columns[:, k] * solved
            residual[k] = residual[k] + (Matrix([solved]).jacobian(vars) * linear)[0]
            residual = _expand(residual)

    return residual, _expand(generator)


# =============================================================================
# Normal form
# =============================================================================

@dataclass(frozen=True)
class NormalFormResult:
    """
    Outcome of normal_form.

    Iterating yields (field, generator), so ``Y, U = normal_form(...)``
    works as well.

    Attributes:
        field: The normalized vector field, to the requested order
        generator: Generator U of the inverse normalizing transformation
        generators: The per-order family Y[0], ..., Y[order-2]
        eigenvalues: Diagonal of the linear part used for the divisors
    """
    field: List[Expr]
    generator: List[Expr]
    generators: List[List[Expr]]
    eigenvalues: Tuple[Expr, ...]

    def __iter__(self):
        return iter((self.field, self.generator))


def normal_form(X, vars, order: int, options: Optional[NormalFormOptions] = None,
                **overrides) -> NormalFormResult:
    """
    Reduce the vector field X to its normal form with a Lie transform.

    The linear part of X is assumed to be in Jordan normal form (see
    jordan). If u is the transformation generated by U, i.e.
    u = forward_action(vars, U, vars, order), then Du.X = Y o u, and with
    v = backward_action(vars, U, vars, order), Dv.Y = X o v.

    Args:
        X: Sequence of polynomials in vars, vanishing at the origin
        vars: Variable tuple
        order: Number of orders to normalize; the result keeps degrees
            1 through order
        options: NormalFormOptions, or a dict of its fields; keyword
            overrides resonance_test= and form= are applied on top

    Returns:
        NormalFormResult (unpacks to (Y, U))

    Raises:
        ShapeError: len(X) != len(vars)
        UnrecognizedOptionError: unknown option name or form, or options
            of the wrong type
        SingularDivisorError: a non-resonant term has a zero divisor
    """
    _check_shape(X, vars)
    if options is None:
        options = NormalFormOptions()
    elif isinstance(options, Mapping):
        options = NormalFormOptions().replace(**options)
    elif not isinstance(options, NormalFormOptions):
        raise UnrecognizedOptionError("options", options)
    if overrides:
        options = options.replace(**overrides)
    if order < 1:
        raise NormalFormError(f"order must be a positive integer, got {order}")

    vars = tuple(vars)
    n = len(vars)
    parts = graded_components(X, vars)
    if 0 in parts:
        logger.warning("Constant terms of the vector field are ignored")
    linear = parts.get(1, zeros(n, 1))
    eigs = eigenvalues(linear, vars)
    solve = options.solver
    zero_test = options.resonance_test

    if options.form is FormStrategy.SEMISIMPLE and not linear.jacobian(list(vars)).is_diagonal():
        logger.warning("Linear part is not diagonal; the semisimple solver ignores its off-diagonal terms")

    logger.info(f"Normal form to order {order} ({options.form.value}), eigenvalues {eigs}")

    generators: List[Matrix] = []
    F = GradedTable(_backward_rule(
        parts, n, lambda j: generators[j],
        lambda field, gen: _bracket(gen, field, vars), sign=1,
    ))
    F[0, 0] = linear

    for i in range(order - 1):
        logger.debug(f"Normalizing at order: {i + 2}")
        forcing = F[i, 1]
        for j in range(i):
            forcing = forcing + binomial(i, j) * _bracket(generators[j], F[i - j, 0], vars)
        remainder, gen = solve(linear, eigs, _expand(forcing), vars, i + 1, zero_test)
        F[i + 1, 0] = remainder
        generators.append(gen)

    field = _backward_sum(F, n, order)
    generator = sum((generators[i] / factorial(i) for i in range(order - 1)), zeros(n, 1))

    return NormalFormResult(
        field=_to_list(field),
        generator=_to_list(generator),
        generators=[_to_list(g) for g in generators],
        eigenvalues=eigs,
    )


# =============================================================================
# Actions of generators
# =============================================================================

def forward_adjoint_action(X, U, vars, order: int) -> List[Expr]:
    """
    Action of the generator U on the vector field X, to order.

    If u is generated by U and Y = forward_adjoint_action(X, U, vars, n),
    then Du.Y = X o u.
    """
    _check_shape(X, vars, "X")
    _check_shape(U, vars, "U")
    n = len(vars)
    table = GradedTable(_forward_rule(
        graded_components(X, vars), n, _pieces(U, vars),
        lambda F, Uj: _bracket(F, Uj, vars),
    ))
    return _to_list(_forward_sum(table, n, order))


def backward_adjoint_action(X, U, vars, order: int) -> List[Expr]:
    """
    Reverse action of the generator U on the vector field X, to order.

    If u is generated by U and Y = backward_adjoint_action(X, U, vars, n),
    then Du.X = Y o u.
    """
    _check_shape(X, vars, "X")
    _check_shape(U, vars, "U")
    n = len(vars)
    table = GradedTable(_backward_rule(
        graded_components(X, vars), n, _pieces(U, vars),
        lambda F, Uj: _bracket(F, Uj, vars),
    ))
    return _to_list(_backward_sum(table, n, order))


def _function_action(f, U, vars, order: int, forward: bool):
    _check_shape(U, vars, "U")
    scalar = not _is_sequence(f)
    subject = [f] if scalar else list(f)
    width = len(subject)
    parts = graded_components(subject, vars)
    jacobian_vars = list(vars)

    def contract(F, Uj):
        return F.jacobian(jacobian_vars) * Uj

    if forward:
        table = GradedTable(_forward_rule(parts, width, _pieces(U, vars), contract))
        graded = _forward_sum(table, width, order)
    else:
        table = GradedTable(_backward_rule(parts, width, _pieces(U, vars), contract))
        graded = _backward_sum(table, width, order)

    result = _to_list(parts.get(0, zeros(width, 1)) + graded)
    return result[0] if scalar else result


def forward_action(f, U, vars, order: int):
    """
    Action of the generator U on the function f, to order.

    If u is generated by U and g = forward_action(f, U, vars, n), then
    g = f o u. In particular u itself is forward_action(vars, U, vars, n).

    Args:
        f: An expression, or a sequence of expressions, in vars
        U: Generator, a vector field in vars
        vars: Variable tuple
        order: Highest degree kept

    Returns:
        An expression if f is one, otherwise a list
    """
    return _function_action(f, U, vars, order, forward=True)


def backward_action(f, U, vars, order: int):
    """
    Reverse action of the generator U on the function f, to order.

    If u is generated by U and g = backward_action(f, U, vars, n), then
    g o u = f. The inverse of u is backward_action(vars, U, vars, n).
    """
    return _function_action(f, U, vars, order, forward=False)


def generator(f, vars, order: int) -> List[Expr]:
    """
    Vector field generating the formal diffeomorphism f, to order.

    f must have the identity as its linear part. This inverts
    forward_action(vars, U, vars, order) with respect to U.
    """
    _check_shape(f, vars, "f")
    n = len(vars)
    parts = graded_components(f, vars)
    jacobian_vars = list(vars)

    def rule(i, k):
        if i == 0:
            return [], lambda _: factorial(k + 1) * parts.get(k + 2, zeros(n, 1))
        deps = ([(i - 1, k + 1)]
                + [(j, k) for j in range(i)]
                + [(i - j - 1, 0) for j in range(i)])

        def combine(values):
            total = values[0]
            for j in range(i):
                total = total - binomial(i - 1, j) * (
                    values[1 + j].jacobian(jacobian_vars) * values[1 + i + j])
            return _expand(total)
        return deps, combine

    Y = GradedTable(rule)
    return _to_list(sum((Y[i, 0] / factorial(i) for i in range(order - 1)), zeros(n, 1)))


def exponential(X, vars, t, order: int) -> List[Expr]:
    """
    Near-identity diffeomorphism generated by t X, to order.

    This is forward_action(vars, t X, vars, order), so generator inverts it
    at t = 1. For a homogeneous X it is the time-t flow map exp(tX). Only
    vars are graded; t may be a symbol or a number.

    Raises:
        NormalFormError: X has constant or linear terms
    """
    _check_shape(X, vars)
    low = [d for d in graded_components(X, vars) if d < 2]
    if low:
        raise NormalFormError(
            f"exponential needs a field without terms of degree {low}"
        )
    return forward_action(list(vars), [t * sympify(c) for c in X], vars, order)


# =============================================================================
# Linear changes of variables
# =============================================================================

class JordanForm(NamedTuple):
    """
    Vector field with its linear part in Jordan form.

    forward and inverse are the linear substitutions f and g with
    Df.field = X o f and Dg.X = field o g.
    """
    field: List[Expr]
    forward: List[Expr]
    inverse: List[Expr]


def jordan(X, old_vars, new_vars) -> JordanForm:
    """
    Transform X so that its linear part is in Jordan normal form.

    Args:
        X: Vector field in old_vars
        old_vars: Current variables
        new_vars: Variables of the transformed field

    Returns:
        JordanForm(field, forward, inverse)
    """
    _check_shape(X, old_vars, "X")
    _check_shape(X, new_vars, "X")
    field = _as_field(X)
    n = len(old_vars)
    linear = graded_components(field, old_vars).get(1, zeros(n, 1))
    A = linear.jacobian(list(old_vars))

    logger.info(f"Jordan reduction of linear part {A.tolist()}")
    P, J = A.jordan_form()
    T = P.inv()
    logger.debug(f"Jordan matrix: {J.tolist()}")

    forward = P * Matrix(list(new_vars))
    inverse = T * Matrix(list(old_vars))
    substituted = field.subs(dict(zip(old_vars, forward)), simultaneous=True)
    return JordanForm(
        field=_to_list(T * substituted),
        forward=_to_list(forward),
        inverse=_to_list(inverse),
    )


def vf_transform(X, old_vars, sub, new_vars, order: Optional[int] = None,
                 time: Optional[Symbol] = None) -> List[Expr]:
    """
    Transform the vector field X by the change of variables old = sub(new).

    The result is (D sub)^-1 . (X o sub - d sub/dt), where the time
    derivative only appears when `time` is given. With `order`, the result
    is truncated to that total degree in new_vars.
    """
    _check_shape(X, old_vars, "X")
    _check_shape(sub, new_vars, "sub")
    field = _as_field(X)
    substitution = _as_field(sub)
    new_vars = list(new_vars)

    composed = field.subs(dict(zip(old_vars, substitution)), simultaneous=True)
    if time is not None:
        composed = composed - substitution.diff(time)
    inverse = substitution.jacobian(new_vars).inv()

    if order is None:
        return _to_list(inverse * composed)
    inverse = inverse.applyfunc(lambda e: taylor(e, new_vars, order))
    composed = composed.applyfunc(lambda e: taylor(e, new_vars, order))
    return [taylor(e, new_vars, order) for e in inverse * composed]


def complexification(w: Symbol, z: Symbol) -> List[Expr]:
    """Substitution (x, y) = ((w + z)/2, -I(w - z)/2); z stands for conj(w)."""
    return [w / 2 + z / 2, -I * w / 2 + I * z / 2]


def realification(x: Symbol, y: Symbol) -> List[Expr]:
    """Substitution (w, z) = (x + I y, x - I y)."""
    return [x + I * y, x - I * y]


__all__ = [
    # Errors
    'NormalFormError',
    'ShapeError',
    'UnrecognizedOptionError',
    'SingularDivisorError',

    # Options
    'FormStrategy',
    'NormalFormOptions',
    'chop',

    # Engine
    'normal_form',
    'NormalFormResult',
    'semisimple_solve',
    'nilpotent_solve',
    'lie_bracket',
    'divisor',
    'is_resonant',

    # Actions
    'forward_adjoint_action',
    'backward_adjoint_action',
    'forward_action',
    'backward_action',
    'generator',
    'exponential',

    # Changes of variables
    'jordan',
    'JordanForm',
    'vf_transform',
    'complexification',
    'realification',

    # Polynomial helpers
    'GradedTable',
    'graded_components',
    'homogeneous_part',
    'grade',
    'taylor',
    'monomial_exponents',
    'eigenvalues',
]


if __name__ == "__main__":
    from sympy import symbols

    logging.basicConfig(level=logging.INFO)

    print("=" * 60)
    print("normalform - Lie-series normal forms")
    print("=" * 60)

    x, y, w, z = symbols('x y w z')

    print("\n1. Scalar field x' = x + x^2")
    Y, U = normal_form([x + x**2], [x], 3)
    print(f"   Normal form: {Y}")
    print(f"   Generator:   {U}")
    print(f"   u = {forward_action([x], U, [x], 3)}")

    print("\n2. Hopf field x' = -y + x^2 y, y' = x + x y^2")
    hopf = [-y + x**2 * y, x + x * y**2]
    J = jordan(hopf, [x, y], [w, z])
    print(f"   Diagonalized: {J.field}")
    result = normal_form(J.field, [w, z], 3, form=FormStrategy.SEMISIMPLE)
    print(f"   Eigenvalues:  {result.eigenvalues}")
    print(f"   Normal form:  {result.field}")
    print(f"   Generator:    {result.generator}")
