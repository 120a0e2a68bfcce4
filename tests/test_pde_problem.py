"""Unit tests for the parameter handler, the affine problems and the affine decompositions.

This module contains tests that verify:
- parameters are assigned only if they have the right size and lie within the bounds;
- the default theta functions raise, the ones provided via set_theta_functions or define_theta_functions are used;
- non-positive stability lower bounds are rejected;
- the numbers of affine components are validated and exported.
"""

import numpy as np
import pytest

import rb_transient.pde_problem.parameter_handler as ph
import rb_transient.pde_problem.affine_problem as ap
import rb_transient.pde_problem.affine_problem_unsteady as apu
import rb_transient.rb_library.affine_decomposition.affine_decomposition as ad
import rb_transient.rb_library.affine_decomposition.affine_decomposition_unsteady as adu


def test_parameter_handler_bounds_and_assignment():
    parameter_handler = ph.ParameterHandler()
    parameter_handler.assign_parameters_bounds([0.0, 1.0], [1.0, 3.0])

    np.testing.assert_array_equal(parameter_handler.param, [0.0, 1.0])
    assert parameter_handler.num_parameters == 2

    parameter_handler.assign_parameters([0.5, 2.0])
    np.testing.assert_array_equal(parameter_handler.param, [0.5, 2.0])

    with pytest.raises(ValueError):
        parameter_handler.assign_parameters([0.5, 4.0])
    with pytest.raises(ValueError):
        parameter_handler.assign_parameters([0.5])
    np.testing.assert_array_equal(parameter_handler.param, [0.5, 2.0])


def test_parameter_handler_rejects_inverted_bounds():
    with pytest.raises(ValueError):
        ph.ParameterHandler().assign_parameters_bounds([1.0], [0.0])


def test_parameter_handler_generates_parameters_within_bounds():
    parameter_handler = ph.ParameterHandler()
    parameter_handler.assign_parameters_bounds([0.0, -1.0], [1.0, 1.0])

    param = parameter_handler.generate_parameter(seed=3)

    assert np.all(param >= parameter_handler.param_min) and np.all(param <= parameter_handler.param_max)
    np.testing.assert_array_equal(param, parameter_handler.generate_parameter(seed=3))


def test_default_theta_functions_raise():
    problem = ap.AffineProblem(ph.ParameterHandler())
    with pytest.raises(Exception):
        problem.get_full_theta_a(np.zeros(0))


def test_set_theta_functions():
    problem = apu.AffineProblemUnsteady(ph.ParameterHandler(1))
    problem.set_theta_functions(theta_a=lambda p: [1.0, 2.0 * p[0]], theta_f=lambda p: 3.0,
                                theta_outputs=[lambda p: [p[0]]], theta_m=lambda p: [4.0])

    np.testing.assert_array_equal(problem.get_full_theta_a(np.array([2.0])), [1.0, 4.0])
    np.testing.assert_array_equal(problem.get_full_theta_f(np.array([2.0])), [3.0])
    np.testing.assert_array_equal(problem.get_full_theta_m(np.array([2.0])), [4.0])
    np.testing.assert_array_equal(problem.get_full_theta_output(np.array([2.0]), 0), [2.0])
    assert problem.n_outputs == 1

    with pytest.raises(IndexError):
        problem.get_full_theta_output(np.array([2.0]), 1)


def test_define_theta_functions_in_derived_problem():
    class ConstantProblem(ap.AffineProblem):
        def define_theta_functions(self):
            self.M_full_theta_a = lambda p: np.array([5.0])
            return

    problem = ConstantProblem(ph.ParameterHandler())
    np.testing.assert_array_equal(problem.get_full_theta_a(np.zeros(0)), [5.0])


def test_stability_lower_bound_must_be_positive():
    problem = ap.AffineProblem(ph.ParameterHandler())
    assert problem.get_stability_lower_bound(np.zeros(0)) == 1.0

    problem.set_stability_lower_bound(lambda p: 0.0)
    with pytest.raises(ValueError):
        problem.get_stability_lower_bound(np.zeros(0))


def test_affine_decomposition_counts():
    affine_decomposition = adu.AffineDecompositionUnsteady(_qa=2, _qf=1, _qm=3, _ql=[1, 2])

    assert (affine_decomposition.qa, affine_decomposition.qf, affine_decomposition.qm) == (2, 1, 3)
    assert affine_decomposition.ql == [1, 2]
    assert affine_decomposition.n_outputs == 2
    assert affine_decomposition.as_dict() == {'Q_a': 2, 'Q_f': 1, 'Q_l': [1, 2], 'Q_m': 3}

    affine_decomposition.set_Q(1, 1)
    assert (affine_decomposition.qa, affine_decomposition.qm, affine_decomposition.n_outputs) == (1, 3, 0)


def test_affine_decomposition_rejects_invalid_counts():
    with pytest.raises(ValueError):
        ad.AffineDecomposition(_qa=-1, _qf=1)
    with pytest.raises(ValueError):
        adu.AffineDecompositionUnsteady(_qa=1, _qf=1, _qm=1.5)
