"""
easy - User-friendly interface for normal form computations

No SymPy knowledge required. Just use strings.

Examples:
    >>> from easy import normalize, bracket, flow
    >>> normalize("x + x^2")
    >>> normalize("-y + x^2*y, x + x*y^2", diagonalize=True, form="semisimple")
    >>> bracket("x, y", "-y, x")
    >>> flow("x^2", order=5)
"""

import re
from typing import Any, Dict, List, Sequence, Union

from sympy import E, I, Poly, Symbol, cos, exp, pi, sin, sqrt
from sympy.parsing.sympy_parser import (
    parse_expr, standard_transformations,
    implicit_multiplication_application, convert_xor
)

from normalform import exponential, jordan, lie_bracket, normal_form


# =============================================================================
# String Parsing Engine
# =============================================================================

class FieldParser:
    """
    Parse human-readable vector fields into lists of SymPy expressions.

    Supports:
        - Components separated by commas or semicolons: "-y + x^2*y, x + x*y^2"
        - Optional enclosing brackets: "[x + x^2]"
        - Standard math: +, -, *, /, ^, **, implicit multiplication (2xy)
        - The imaginary unit as i or I
    """

    # Standard transformations for parsing
    TRANSFORMATIONS = standard_transformations + (
        implicit_multiplication_application,
        convert_xor,
    )

    CONSTANTS = {
        'sin': sin, 'cos': cos, 'exp': exp, 'sqrt': sqrt,
        'pi': pi, 'e': E, 'i': I, 'I': I,
    }

    def parse_field(self, text: str, var_names: Union[str, Sequence[str], None] = None,
                    params: Union[str, Sequence[str], None] = None) -> dict:
        """
        Parse a vector field string like "-y + x^2*y, x + x*y^2".

        Args:
            text: Components of the field as a string
            var_names: Variable names, as a list or "x y" / "x, y"
                (default: auto-detect single letters, sorted)
            params: Names of symbolic parameters that are not variables

        Returns:
            dict with 'field', 'vars', 'params'
        """
        components = self.split_components(text)
        param_names = self._names(params) if params is not None else []
        if var_names is None:
            var_names = self._detect_variables(components, param_names)
        else:
            var_names = self._names(var_names)

        vars_syms = [Symbol(v) for v in var_names]
        param_syms = [Symbol(p) for p in param_names]

        local_dict = dict(self.CONSTANTS)
        local_dict.update({s.name: s for s in vars_syms + param_syms})

        field = [self.parse_component(c, local_dict) for c in components]
        return {
            'field': field,
            'vars': vars_syms,
            'params': param_syms,
        }

    def parse_component(self, component: str, local_dict: dict):
        try:
            return parse_expr(component, local_dict=local_dict,
                              transformations=self.TRANSFORMATIONS)
        except Exception as e:
            raise ValueError(f"Could not parse '{component}': {e}")

    def split_components(self, text: str) -> List[str]:
        """Split a field string into its component strings."""
        body = text.strip()
        if body[:1] in '[(' and body[-1:] in '])' and self._is_enclosed(body):
            body = body[1:-1]
        components = [c.strip() for c in re.split(r'[,;]', body)]
        if not components or any(not c for c in components):
            raise ValueError(f"Could not parse '{text}': empty component")
        return components

    def _is_enclosed(self, body: str) -> bool:
        # True when the opening bracket closes at the very end
        depth = 0
        for pos, char in enumerate(body):
            if char in '[(':
                depth += 1
            elif char in '])':
                depth -= 1
                if depth == 0 and pos < len(body) - 1:
                    return False
        return depth == 0

    def _names(self, names: Union[str, Sequence[str]]) -> List[str]:
        if isinstance(names, str):
            return [n for n in re.split(r'[\s,]+', names) if n]
        return [str(n) for n in names]

    def _detect_variables(self, components: List[str], exclude: List[str]) -> List[str]:
        """Auto-detect single-letter variables."""
        letters = set()
        for component in components:
            for name in re.findall(r'[A-Za-z_]+', component):
                if name in self.CONSTANTS or name in exclude:
                    continue
                # implicit multiplication splits "xy" into x*y
                if name.islower() and name.isalpha():
                    letters.update(name)

        # e and i are constants
        vars_list = sorted(letters - {'e', 'i'} - set(exclude))
        return vars_list if vars_list else ['x']


# Global parser instance
_parser = FieldParser()


def _parse_pair(X: str, Y: str, vars) -> tuple:
    """Parse two fields over the same variables."""
    if vars is None:
        components = _parser.split_components(X) + _parser.split_components(Y)
        vars = _parser._detect_variables(components, [])
    return _parser.parse_field(X, vars), _parser.parse_field(Y, vars)


def _resonant_terms(field, vars) -> List[tuple]:
    """Nonlinear monomial terms of a normal form, by component."""
    terms = []
    for k, component in enumerate(field):
        for exponent, coeff in Poly(component, *vars).terms():
            if coeff == 0 or sum(exponent) < 2:
                continue
            term = coeff
            for v, e in zip(vars, exponent):
                term *= v**e
            terms.append((k, term))
    return terms


# =============================================================================
# One-Liner Convenience Functions
# =============================================================================

def normalize(field: str, vars=None, order: int = 3, form: str = 'nilpotent',
              diagonalize: bool = False) -> Dict[str, Any]:
    """
    Compute the normal form of a vector field.

    Args:
        field: Vector field as string (e.g., "x + x^2", "-y + x^2*y, x + x*y^2")
        vars: Variable names (default: auto-detect)
        order: Normalize up to this degree (default: 3)
        form: 'nilpotent' (any Jordan linear part) or 'semisimple'
        diagonalize: First bring the linear part to Jordan form, in new
            variables named after the old ones with a trailing 1

    Returns:
        dict with keys:
            - 'normal_form': Normalized field, as strings
            - 'generator': Generator of the normalizing transformation
            - 'eigenvalues': Diagonal of the linear part
            - 'resonant_terms': (component, term) pairs that survived
            - 'vars': Variables of the result

    Examples:
        >>> normalize("x + x^2")
        {'normal_form': ['x'], 'generator': ['-x**2'], ...}
    """
    parsed = _parser.parse_field(field, vars)
    X, vars_syms = parsed['field'], parsed['vars']

    transformation = None
    if diagonalize:
        new_vars = [Symbol(f"{v.name}1") for v in vars_syms]
        transformation = jordan(X, vars_syms, new_vars)
        X, vars_syms = transformation.field, new_vars

    result = normal_form(X, vars_syms, order, form=form)
    resonant = _resonant_terms(result.field, vars_syms)

    return {
        'normal_form': [str(c) for c in result.field],
        'normal_form_expr': result.field,
        'generator': [str(c) for c in result.generator],
        'generator_expr': result.generator,
        'eigenvalues': [str(lam) for lam in result.eigenvalues],
        'eigenvalues_expr': list(result.eigenvalues),
        'resonant_terms': [(k, str(term)) for k, term in resonant],
        'vars': [str(v) for v in vars_syms],
        'vars_expr': vars_syms,
        'jordan': transformation,
        'order': order,
    }


def bracket(X: str, Y: str, vars=None) -> Dict[str, Any]:
    """
    Lie bracket [X, Y] = DX.Y - DY.X of two vector fields.

    Examples:
        >>> bracket("x, y", "-y, x")
        {'bracket': ['0', '0'], ...}
    """
    parsed_x, parsed_y = _parse_pair(X, Y, vars)
    vars_syms = parsed_x['vars']
    result = lie_bracket(parsed_x['field'], parsed_y['field'], vars_syms)
    return {
        'bracket': [str(c) for c in result],
        'bracket_expr': result,
        'vars': [str(v) for v in vars_syms],
        'commute': all(c == 0 for c in result),
    }


def flow(field: str, vars=None, order: int = 3, t: str = 't') -> Dict[str, Any]:
    """
    Near-identity map generated by t times a vector field, as a series.

    For a homogeneous field this is the time-t flow. Order bounds the
    degree in the variables only.

    Examples:
        >>> flow("x^2", order=5)
        {'flow': ['t**4*x**5 + t**3*x**4 + t**2*x**3 + t*x**2 + x'], ...}
    """
    parsed = _parser.parse_field(field, vars, params=[t])
    time = Symbol(t)
    result = exponential(parsed['field'], parsed['vars'], time, order)
    return {
        'flow': [str(c) for c in result],
        'flow_expr': result,
        'vars': [str(v) for v in parsed['vars']],
        't': time,
        'order': order,
    }


# =============================================================================
# Object-Oriented Interface
# =============================================================================

class VectorField:
    """
    User-friendly vector field class.

    Examples:
        >>> X = VectorField("x + x^2")
        >>> X.normal_form()
        [x]
        >>> X.generator()
        [-x**2]
    """

    def __init__(self, field: str, vars=None, order: int = 3, form: str = 'nilpotent',
                 diagonalize: bool = False):
        """
        Create a vector field from a string.

        Args:
            field: Components as string (e.g., "-y + x^2*y, x + x*y^2")
            vars: Variable names (default: auto-detect)
            order: Normalization order (default: 3)
            form: 'nilpotent' or 'semisimple'
            diagonalize: Bring the linear part to Jordan form first
        """
        self.field = field
        self.vars = vars
        self.order = order
        self.form = form
        self.diagonalize = diagonalize
        self._result = None

    def _ensure_computed(self):
        if self._result is None:
            self._result = normalize(self.field, self.vars, self.order,
                                     self.form, self.diagonalize)

    def normal_form(self) -> List:
        """Return the normalized field."""
        self._ensure_computed()
        return self._result['normal_form_expr']

    def generator(self) -> List:
        self._ensure_computed()
        return self._result['generator_expr']

    def eigenvalues(self) -> List:
        """Return the eigenvalues used for the resonance test."""
        self._ensure_computed()
        return self._result['eigenvalues_expr']

    def resonant_terms(self) -> List[tuple]:
        """Return (component, term) pairs of nonlinear resonant terms."""
        self._ensure_computed()
        return self._result['resonant_terms']

    def is_linearizable(self) -> bool:
        """True if no nonlinear term survives to the requested order."""
        return not self.resonant_terms()

    def explain(self) -> str:
        """Return human-readable explanation."""
        self._ensure_computed()
        r = self._result

        lines = [
            "╔══════════════════════════════════════════════════════════╗",
            f"║  Field: {self.field:<50} ║",
            "╠══════════════════════════════════════════════════════════╣",
            f"║  Variables: {', '.join(r['vars']):<46} ║",
            f"║  Order: {r['order']:<50} ║",
            f"║  Eigenvalues: {', '.join(r['eigenvalues']):<44} ║",
            "╠══════════════════════════════════════════════════════════╣",
            "║  Normal form:                                            ║",
        ]

        for v, c in zip(r['vars'], r['normal_form']):
            lines.append(f"║    {v + chr(39) + ' = ' + c:<54} ║")

        lines.extend([
            "╠══════════════════════════════════════════════════════════╣",
            "║  Generator:                                              ║",
        ])

        for c in r['generator']:
            lines.append(f"║    • {c:<52} ║")

        linearizable = 'Yes' if not r['resonant_terms'] else 'No'
        lines.extend([
            "╠══════════════════════════════════════════════════════════╣",
            f"║  Linearizable to order {r['order']}: {linearizable:<31} ║",
            "╚══════════════════════════════════════════════════════════╝",
        ])

        return '\n'.join(lines)

    def __repr__(self):
        return f"VectorField('{self.field}')"


# =============================================================================
# Quick Reference / Help
# =============================================================================

def help_syntax():
    """Print syntax help for vector field strings."""
    help_text = """
╔══════════════════════════════════════════════════════════════════════╗
║                    easy - Syntax Reference                           ║
╠══════════════════════════════════════════════════════════════════════╣
║                                                                      ║
║  Vector fields (one component per variable):                         ║
║    "x + x^2"                 →  x' = x + x²                          ║
║    "-y + x^2*y, x + x*y^2"   →  x' = -y + x²y, y' = x + xy²          ║
║    "[i*x + x^2*y; -i*y]"     →  complex coordinates                  ║
║                                                                      ║
║  Variables:                                                          ║
║    auto-detected single letters, sorted alphabetically               ║
║    or given explicitly: vars="y x"                                   ║
║                                                                      ║
║  Operators:                                                          ║
║    +, -, *, /              →  standard arithmetic                    ║
║    ^  or  **               →  exponentiation                         ║
║    2xy                     →  implicit multiplication                ║
║                                                                      ║
╚══════════════════════════════════════════════════════════════════════╝
"""
    print(help_text)


# =============================================================================
# Module exports
# =============================================================================

__all__ = [
    # One-liner functions
    'normalize',
    'bracket',
    'flow',

    # Classes
    'VectorField',

    # Utilities
    'FieldParser',
    'help_syntax',
]


# =============================================================================
# Demo
# =============================================================================

if __name__ == "__main__":
    print("=" * 60)
    print("easy - User-Friendly Interface Demo")
    print("=" * 60)

    help_syntax()

    print("\n1. Scalar field: x' = x + x^2")
    X = VectorField("x + x^2")
    print(X.explain())

    print("\n2. Hopf field: x' = -y + x^2 y, y' = x + x y^2")
    hopf = VectorField("-y + x^2*y, x + x*y^2", form="semisimple", diagonalize=True)
    print(hopf.explain())

    print("\n3. Rotation commutes with the Euler field:")
    result = bracket("x, y", "-y, x")
    print(f"   [X, Y] = {result['bracket']}")
    print(f"   commute = {result['commute']}")

    print("\n4. Flow of x' = x^2:")
    result = flow("x^2", order=5)
    print(f"   x(t) = {result['flow'][0]}")
