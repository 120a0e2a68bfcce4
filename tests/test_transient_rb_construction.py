"""Unit tests for the TransientRBConstruction class.

This module contains tests that verify:
- the basis is orthonormal with respect to the inner product matrix;
- the reduced operators are the projections of the high-fidelity ones;
- the inner products of the Riesz representors match their definitions;
- linearly dependent basis functions and inconsistent affine components are rejected;
- the L2 projection of the initial condition, also when the evaluation is sized before being filled.
"""

import numpy as np
import pytest
import scipy.sparse

import rb_transient.rb_library.rb_construction.transient_rb_construction as trbc
import rb_transient.utils.array_utils as arr_utils


def test_basis_is_orthonormal(random_problem):
    data = random_problem(N_max=4)
    basis = np.array(data.construction.basis).T

    np.testing.assert_allclose(basis.T.dot(data.operators['X']).dot(basis), np.eye(4), atol=1e-10)
    assert data.construction.N == 4


def test_reduced_operators_are_projections(random_problem):
    data = random_problem(N_max=4)
    evaluation, operators = data.evaluation, data.operators
    basis = np.array(data.construction.basis).T

    np.testing.assert_allclose(evaluation.RB_L2_matrix, basis.T.dot(operators['L2']).dot(basis), atol=1e-12)
    for q in range(2):
        np.testing.assert_allclose(evaluation.RB_Aq_vector[q], basis.T.dot(operators['A'][q]).dot(basis), atol=1e-12)
        np.testing.assert_allclose(evaluation.RB_M_q_vector[q], basis.T.dot(operators['M'][q]).dot(basis),
                                   atol=1e-12)
        np.testing.assert_allclose(evaluation.RB_Fq_vector[q], basis.T.dot(operators['f'][q]), atol=1e-12)
    np.testing.assert_allclose(evaluation.RB_output_vectors[1][0], basis.T.dot(operators['output'][1][0]),
                               atol=1e-12)


def test_representor_innerprods(random_problem):
    data = random_problem(N_max=3)
    evaluation, operators = data.evaluation, data.operators
    X = operators['X']
    basis = np.array(data.construction.basis).T
    X_inv = np.linalg.inv(X)

    A0_phi, M1_phi = operators['A'][0].dot(basis), operators['M'][1].dot(basis)
    f1 = operators['f'][1]

    np.testing.assert_allclose(evaluation.Fq_Mq_representor_innerprods[1, 1], M1_phi.T.dot(X_inv).dot(f1),
                               rtol=1e-8)
    np.testing.assert_allclose(evaluation.Fq_Aq_representor_innerprods[1, 0], -A0_phi.T.dot(X_inv).dot(f1),
                               rtol=1e-8)
    np.testing.assert_allclose(evaluation.Aq_Mq_representor_innerprods[0, 1], -A0_phi.T.dot(X_inv).dot(M1_phi),
                               rtol=1e-8)
    q = arr_utils.triangular_index(0, 1, 2)
    np.testing.assert_allclose(evaluation.Mq_Mq_representor_innerprods[q],
                               operators['M'][0].dot(basis).T.dot(X_inv).dot(M1_phi), rtol=1e-8)
    assert evaluation.Fq_representor_innerprods[arr_utils.triangular_index(1, 1, 2)] == \
        pytest.approx(f1.dot(X_inv).dot(f1), rel=1e-8)


def test_linearly_dependent_basis_function(random_problem):
    data = random_problem(N_max=2)
    construction = data.construction
    combination = 2.0 * construction.basis[0] - 3.0 * construction.basis[1]

    with pytest.raises(ValueError):
        construction.enrich_basis(combination)
    with pytest.raises(ValueError):
        construction.enrich_basis(np.zeros(20))

    assert construction.N == 2
    assert data.evaluation.get_n_basis_functions() == 2


def test_inconsistent_affine_components(random_problem):
    data = random_problem(N_max=1)
    operators = data.operators

    with pytest.raises(ValueError):
        trbc.TransientRBConstruction(data.make_evaluation(), operators['X'], operators['L2'], operators['A'][:1],
                                     operators['f'], operators['M'], operators['u0'], operators['output'])
    with pytest.raises(ValueError):
        trbc.TransientRBConstruction(data.make_evaluation(), operators['X'], operators['L2'], operators['A'],
                                     operators['f'], operators['M'], operators['u0'], operators['output'][:1])


def test_initial_condition_projection(random_problem):
    data = random_problem(N_max=3)
    evaluation, construction, operators = data.evaluation, data.construction, data.operators

    # the initial condition is the first basis function
    for N in range(1, 4):
        u0_N = construction.reconstruct_solution(evaluation.RB_initial_condition_all_N[N - 1])
        np.testing.assert_allclose(u0_N, operators['u0'], atol=1e-10)
        assert evaluation.initial_L2_error_all_N[N - 1] == pytest.approx(0.0, abs=1e-7)


def test_initial_condition_projection_error(random_problem):
    data = random_problem(N_max=3)
    construction, operators = data.construction, data.operators
    L2 = operators['L2']
    u0 = operators['u0']

    construction_without_u0 = trbc.TransientRBConstruction(data.make_evaluation(), operators['X'], L2,
                                                           operators['A'], operators['f'], operators['M'],
                                                           u0, operators['output'])
    for phi in data.construction.basis[1:]:
        construction_without_u0.enrich_basis(phi)

    coefficients, L2_error = construction_without_u0.project_initial_condition(2)
    basis = np.array(construction_without_u0.basis).T
    error = u0 - basis.dot(coefficients)

    np.testing.assert_allclose(basis.T.dot(L2).dot(error), np.zeros(2), atol=1e-10)
    assert L2_error == pytest.approx(np.sqrt(error.dot(L2.dot(error))))
    assert L2_error > 0.0

    with pytest.raises(ValueError):
        construction.project_initial_condition(4)


def test_sparse_operators(random_problem):
    """Sparse high-fidelity matrices give the same reduced data as dense ones"""
    data = random_problem(N_max=2)
    operators = data.operators

    sparse_evaluation = data.make_evaluation()
    sparse_construction = trbc.TransientRBConstruction(
        sparse_evaluation, scipy.sparse.csr_matrix(operators['X']), scipy.sparse.csr_matrix(operators['L2']),
        [scipy.sparse.csr_matrix(A) for A in operators['A']], operators['f'],
        [scipy.sparse.csr_matrix(M) for M in operators['M']], operators['u0'], operators['output'])
    for phi in data.construction.basis:
        sparse_construction.enrich_basis(phi)

    np.testing.assert_allclose(sparse_evaluation.RB_M_q_vector, data.evaluation.RB_M_q_vector, atol=1e-10)
    np.testing.assert_allclose(sparse_evaluation.Aq_Mq_representor_innerprods,
                               data.evaluation.Aq_Mq_representor_innerprods, rtol=1e-8, atol=1e-10)
    np.testing.assert_allclose(sparse_evaluation.initial_L2_error_all_N, data.evaluation.initial_L2_error_all_N,
                               atol=1e-7)


def test_enrichment_of_presized_evaluation(random_problem):
    """Sizing the evaluation before filling it gives the same initial conditions and trajectories"""
    data = random_problem(N_max=3)
    operators = data.operators

    presized = data.make_evaluation()
    presized.resize_data_structures(3)
    construction = trbc.TransientRBConstruction(presized, operators['X'], operators['L2'], operators['A'],
                                                operators['f'], operators['M'], operators['u0'], operators['output'])
    for phi in data.construction.basis:
        construction.enrich_basis(phi)

    assert presized.get_n_basis_functions() == 3
    for N in range(1, 4):
        np.testing.assert_allclose(presized.RB_initial_condition_all_N[N - 1],
                                   data.evaluation.RB_initial_condition_all_N[N - 1], atol=1e-10)
        assert presized.initial_L2_error_all_N[N - 1] == \
            pytest.approx(data.evaluation.initial_L2_error_all_N[N - 1], abs=1e-7)

        presized.solve(N)
        data.evaluation.solve(N)
        np.testing.assert_allclose(presized.RB_temporal_solution_data, data.evaluation.RB_temporal_solution_data,
                                   rtol=1e-8, atol=1e-10)
        np.testing.assert_allclose(presized.error_bound_all_k, data.evaluation.error_bound_all_k,
                                   rtol=1e-6, atol=1e-7)


def test_resize_beyond_basis_size(random_problem):
    """Sizes not reached by the basis yet get placeholders, overwritten by later enrichments"""
    data = random_problem(N_max=2, n_extra=1)
    evaluation, construction = data.evaluation, data.construction

    evaluation.resize_data_structures(4)

    assert evaluation.get_n_basis_functions() == 4
    np.testing.assert_array_equal(evaluation.RB_initial_condition_all_N[2], np.zeros(3))

    construction.enrich_basis(data.extra_basis[0])

    coefficients, L2_error = construction.project_initial_condition(3)
    np.testing.assert_array_equal(evaluation.RB_initial_condition_all_N[2], coefficients)
    assert evaluation.initial_L2_error_all_N[2] == L2_error
    assert evaluation.get_n_basis_functions() == 4
