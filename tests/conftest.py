"""Shared fixtures for the rb_transient test suite.

The fixtures build small high-fidelity problems with random symmetric positive definite affine components, fill a
TransientRBEvaluation through a TransientRBConstruction and return them, together with the high-fidelity data needed
to check the online quantities against their high-fidelity counterparts.
"""

from types import SimpleNamespace

import numpy as np
import pytest

import rb_transient.pde_problem.parameter_handler as ph
import rb_transient.pde_problem.affine_problem_unsteady as apu
import rb_transient.rb_library.affine_decomposition.affine_decomposition_unsteady as adu
import rb_transient.rb_library.temporal_discretization as td
import rb_transient.rb_library.rb_evaluation.transient_rb_evaluation as trbe
import rb_transient.rb_library.rb_construction.transient_rb_construction as trbc


def _random_spd(rng, n, shift=1.0):
    B = rng.normal(size=(n, n))
    return B.dot(B.T) / n + shift * np.eye(n)


def _make_evaluation(theta_a, theta_f, theta_m, theta_outputs, stability_lower_bound, Q, param_bounds,
                     delta_t, euler_theta, n_time_steps):
    parameter_handler = ph.ParameterHandler()
    parameter_handler.assign_parameters_bounds(*param_bounds)

    problem = apu.AffineProblemUnsteady(parameter_handler)
    problem.set_theta_functions(theta_a=theta_a, theta_f=theta_f, theta_outputs=theta_outputs, theta_m=theta_m)
    problem.set_stability_lower_bound(stability_lower_bound)

    affine_decomposition = adu.AffineDecompositionUnsteady(_qa=Q['a'], _qf=Q['f'], _qm=Q['m'], _ql=Q['l'])
    temporal_discretization = td.TemporalDiscretization(delta_t, euler_theta, n_time_steps)

    return trbe.TransientRBEvaluation(problem, affine_decomposition, temporal_discretization)


@pytest.fixture
def scalar_problem():
    """
    One-dimensional problem with a single affine term per operator: mass = stiffness = identity, zero forcing,
    initial condition 1, delta_t = 1. The reduced space coincides with the high-fidelity one.

    Usage:
        def test_x(scalar_problem):
            evaluation, construction = scalar_problem(euler_theta=1.0, n_time_steps=5)
    """

    def factory(euler_theta=1.0, n_time_steps=5):
        evaluation = _make_evaluation(theta_a=lambda p: np.array([1.0]),
                                      theta_f=lambda p: np.array([1.0]),
                                      theta_m=lambda p: np.array([1.0]),
                                      theta_outputs=[lambda p: np.array([1.0])],
                                      stability_lower_bound=lambda p: 1.0,
                                      Q={'a': 1, 'f': 1, 'm': 1, 'l': [1]},
                                      param_bounds=([0.0], [1.0]),
                                      delta_t=1.0, euler_theta=euler_theta, n_time_steps=n_time_steps)
        identity = np.eye(1)
        construction = trbc.TransientRBConstruction(evaluation, identity, identity,
                                                    [identity], [np.zeros(1)], [identity],
                                                    np.ones(1), [[np.ones(1)]])
        construction.enrich_basis(np.ones(1))
        return evaluation, construction

    return factory


@pytest.fixture
def random_problem():
    """
    Random problem with two parameters, Q_a = Q_f = Q_m = 2 and two outputs with Q_l = [2, 1]. The stiffness operator
    is A(mu) = A_0 + mu_0 A_1 and the inner product matrix is X = A_0 + A_1, so that min(1, mu_0) is a rigorous lower
    bound of the coercivity constant. If 'parametrized_mass' is False, the mass operator is M_0, which is also used as
    L2 matrix.

    Usage:
        def test_x(random_problem):
            data = random_problem(N_max=4)
            data.evaluation, data.construction, data.operators, data.extra_basis
            data.make_evaluation()  # fresh evaluation with the same problem and no data
    """

    def factory(n=20, N_max=4, n_extra=2, delta_t=0.05, euler_theta=1.0, n_time_steps=6,
                parametrized_mass=True, seed=0):
        rng = np.random.default_rng(seed)

        A = [_random_spd(rng, n), _random_spd(rng, n, shift=0.5)]
        M = [_random_spd(rng, n), _random_spd(rng, n, shift=0.2)]
        f = [rng.normal(size=n), rng.normal(size=n)]
        outputs = [[rng.normal(size=n), rng.normal(size=n)], [rng.normal(size=n)]]
        X = A[0] + A[1]
        L2 = M[0]
        u0 = rng.normal(size=n)

        theta_m = (lambda p: np.array([1.0, 0.5 * p[1]])) if parametrized_mass else (lambda p: np.array([1.0, 0.0]))

        def make_evaluation():
            fresh = _make_evaluation(theta_a=lambda p: np.array([1.0, p[0]]),
                                     theta_f=lambda p: np.array([1.0, p[1]]),
                                     theta_m=theta_m,
                                     theta_outputs=[lambda p: np.array([1.0, p[0]]),
                                                    lambda p: np.array([p[1]])],
                                     stability_lower_bound=lambda p: min(1.0, p[0]),
                                     Q={'a': 2, 'f': 2, 'm': 2, 'l': [2, 1]},
                                     param_bounds=([0.5, 0.5], [2.0, 2.0]),
                                     delta_t=delta_t, euler_theta=euler_theta, n_time_steps=n_time_steps)
            fresh.set_parameters([0.8, 1.3])
            return fresh

        evaluation = make_evaluation()

        construction = trbc.TransientRBConstruction(evaluation, X, L2, A, f, M, u0, outputs)
        candidates = [u0] + [rng.normal(size=n) for _ in range(N_max + n_extra - 1)]
        for phi in candidates[:N_max]:
            construction.enrich_basis(phi)

        operators = {'A': A, 'M': M, 'f': f, 'output': outputs, 'X': X, 'L2': L2, 'u0': u0}
        return SimpleNamespace(evaluation=evaluation, construction=construction, operators=operators,
                               extra_basis=candidates[N_max:], make_evaluation=make_evaluation)

    return factory
