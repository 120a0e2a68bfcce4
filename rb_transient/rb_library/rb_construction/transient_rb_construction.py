#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Thu Mar 21 14:48:19 2024
"""

import numpy as np
import os

import rb_transient.utils.array_utils as arr_utils

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


class TransientRBConstruction:
    """Class filling the data structures of a :class:`~transient_rb_evaluation.TransientRBEvaluation` from the
    high-fidelity affine components of a linear time-invariant problem and from a sequence of basis functions. The
    basis is enriched one function at a time: each new function is orthonormalized, the evaluation is resized and
    only the new entries of the reduced operators and of the inner products of the Riesz representors are computed.

    The high-fidelity matrices can either be dense numpy arrays or scipy.sparse matrices.
    """

    def __init__(self, _rb_evaluation, _inner_product_matrix, _L2_matrix, _Aq, _Fq, _Mq,
                 _initial_condition, _output_vectors=None):
        """Initialization of the construction. The Riesz representors of the right-hand side and the dual norms of
        the output functionals are computed here, since they do not depend on the basis.

        :param _rb_evaluation: the evaluation to be filled
        :type _rb_evaluation: TransientRBEvaluation
        :param _inner_product_matrix: inner product matrix X of the high-fidelity space
        :type _inner_product_matrix: numpy.ndarray or scipy.sparse
        :param _L2_matrix: L2 inner product matrix of the high-fidelity space
        :type _L2_matrix: numpy.ndarray or scipy.sparse
        :param _Aq: affine components of the stiffness operator
        :type _Aq: list
        :param _Fq: affine components of the right-hand side
        :type _Fq: list[numpy.ndarray]
        :param _Mq: affine components of the mass operator
        :type _Mq: list
        :param _initial_condition: high-fidelity initial condition
        :type _initial_condition: numpy.ndarray
        :param _output_vectors: affine components of each output functional. Defaults to None
        :type _output_vectors: list[list[numpy.ndarray]] or NoneType
        """

        self.M_rb_evaluation = _rb_evaluation
        self.M_X = _inner_product_matrix
        self.M_L2_matrix = _L2_matrix
        self.M_Aq = list(_Aq)
        self.M_Fq = [np.asarray(f, dtype=float) for f in _Fq]
        self.M_Mq = list(_Mq)
        self.M_initial_condition = np.asarray(_initial_condition, dtype=float)
        self.M_output_vectors = [[np.asarray(l, dtype=float) for l in output] for output in _output_vectors] \
            if _output_vectors is not None else []

        affine_decomposition = _rb_evaluation.affine_decomposition
        if (len(self.M_Aq), len(self.M_Fq), len(self.M_Mq)) != \
                (affine_decomposition.qa, affine_decomposition.qf, affine_decomposition.qm) or \
                [len(output) for output in self.M_output_vectors] != affine_decomposition.ql:
            logger.critical("The numbers of high-fidelity affine components do not match the affine decomposition "
                            "of the evaluation")
            raise ValueError("Inconsistent numbers of affine components")

        self.M_basis = []

        self.compute_Fq_representor_innerprods()
        self.compute_output_dual_innerprods()
        self.M_rb_evaluation.set_initial_condition_projector(self._initial_condition_projector)

        return

    def X_inner_product(self, _vec1, _vec2):
        return arr_utils.mydot(_vec1, _vec2, self.M_X)

    def compute_Fq_representor_innerprods(self):
        """Computes the Riesz representors of the affine components of the right-hand side and their inner products
        """

        Fq_representor = self.M_rb_evaluation.Fq_representor
        for q in range(len(self.M_Fq)):
            Fq_representor[q] = arr_utils.solve_inner_product_system(self.M_X, self.M_Fq[q])

        Fq_representor_innerprods = self.M_rb_evaluation.Fq_representor_innerprods
        for q, q1, q2 in self._symmetric_pairs(len(self.M_Fq)):
            Fq_representor_innerprods[q] = self.X_inner_product(Fq_representor[q1], Fq_representor[q2])

        return

    def compute_output_dual_innerprods(self):
        """Computes the inner products of the Riesz representors of the affine components of the outputs. The
        representors themselves are not stored
        """

        for n, output in enumerate(self.M_output_vectors):
            representors = [arr_utils.solve_inner_product_system(self.M_X, l) for l in output]
            output_dual_innerprods = self.M_rb_evaluation.output_dual_innerprods[n]
            for q, q1, q2 in self._symmetric_pairs(len(output)):
                output_dual_innerprods[q] = self.X_inner_product(representors[q1], representors[q2])

        return

    @staticmethod
    def _symmetric_pairs(_Q):
        q = 0
        for q1 in range(_Q):
            for q2 in range(q1, _Q):
                yield q, q1, q2
                q += 1

    def orthonormalize(self, _phi):
        """Orthonormalizes _phi against the current basis with respect to the X inner product, via modified
        Gram-Schmidt

        :param _phi: new basis function
        :type _phi: numpy.ndarray
        :return: the orthonormalized function
        :rtype: numpy.ndarray
        """

        phi = np.array(_phi, dtype=float)
        norm_before = arr_utils.mynorm(phi, self.M_X)

        for basis_function in self.M_basis:
            phi -= self.X_inner_product(phi, basis_function) * basis_function

        norm = arr_utils.mynorm(phi, self.M_X)
        if norm_before == 0.0 or norm < 1e-10 * norm_before:
            logger.critical("The new basis function is linearly dependent on the current basis")
            raise ValueError("Linearly dependent basis function")

        return phi / norm

    def enrich_basis(self, _phi):
        """Adds a function to the basis, resizing the evaluation and computing the new entries of the reduced
        operators, of the reduced outputs and of the inner products of the Riesz representors

        :param _phi: new basis function
        :type _phi: numpy.ndarray
        """

        if any(len(representors) != len(self.M_basis) for representors in self.M_rb_evaluation.Aq_representor) or \
                any(len(representors) != len(self.M_basis) for representors in self.M_rb_evaluation.M_q_representor):
            logger.critical("The Riesz representors of the evaluation have been cleared; the basis cannot be enriched")
            raise ValueError("Missing Riesz representors")

        phi = self.orthonormalize(_phi)
        self.M_basis.append(phi)
        N = len(self.M_basis)

        evaluation = self.M_rb_evaluation
        already_sized = N <= evaluation.get_n_basis_functions()
        evaluation.resize_data_structures(N)
        if already_sized:
            evaluation.set_initial_condition(N, *self.project_initial_condition(N))

        self._update_reduced_matrix(evaluation.RB_L2_matrix, self.M_L2_matrix)
        for q, Aq in enumerate(self.M_Aq):
            self._update_reduced_matrix(evaluation.RB_Aq_vector[q], Aq)
        for q, Mq in enumerate(self.M_Mq):
            self._update_reduced_matrix(evaluation.RB_M_q_vector[q], Mq)

        for q, Fq in enumerate(self.M_Fq):
            evaluation.RB_Fq_vector[q, N - 1] = Fq.dot(phi)
        for n, output in enumerate(self.M_output_vectors):
            for q, l in enumerate(output):
                evaluation.RB_output_vectors[n][q, N - 1] = l.dot(phi)

        for q, Aq in enumerate(self.M_Aq):
            evaluation.Aq_representor[q].append(
                arr_utils.solve_inner_product_system(self.M_X, -arr_utils.matrix_vector_mul(Aq, phi)))
        for q, Mq in enumerate(self.M_Mq):
            evaluation.M_q_representor[q].append(
                arr_utils.solve_inner_product_system(self.M_X, arr_utils.matrix_vector_mul(Mq, phi)))

        self._update_representor_innerprods(N)

        logger.info(f"Basis enriched to N={N}")
        return

    def _update_reduced_matrix(self, _reduced_matrix, _matrix):
        N = len(self.M_basis)
        phi = self.M_basis[-1]
        matrix_phi = arr_utils.matrix_vector_mul(_matrix, phi)
        matrix_T_phi = arr_utils.matrix_vector_mul(_matrix.T, phi)
        for i in range(N):
            _reduced_matrix[i, N - 1] = self.M_basis[i].dot(matrix_phi)
            _reduced_matrix[N - 1, i] = self.M_basis[i].dot(matrix_T_phi)
        return

    def _update_representor_innerprods(self, _N):
        evaluation = self.M_rb_evaluation
        Fq_representor = evaluation.Fq_representor
        Aq_representor = evaluation.Aq_representor
        Mq_representor = evaluation.M_q_representor
        qa, qf, qm = len(self.M_Aq), len(self.M_Fq), len(self.M_Mq)
        last = _N - 1

        for q_f in range(qf):
            for q_a in range(qa):
                evaluation.Fq_Aq_representor_innerprods[q_f, q_a, last] = \
                    self.X_inner_product(Fq_representor[q_f], Aq_representor[q_a][last])
            for q_m in range(qm):
                evaluation.Fq_Mq_representor_innerprods[q_f, q_m, last] = \
                    self.X_inner_product(Fq_representor[q_f], Mq_representor[q_m][last])

        for q, q1, q2 in self._symmetric_pairs(qa):
            for i in range(_N):
                evaluation.Aq_Aq_representor_innerprods[q, i, last] = \
                    self.X_inner_product(Aq_representor[q1][i], Aq_representor[q2][last])
                evaluation.Aq_Aq_representor_innerprods[q, last, i] = \
                    self.X_inner_product(Aq_representor[q1][last], Aq_representor[q2][i])

        for q, q1, q2 in self._symmetric_pairs(qm):
            for i in range(_N):
                evaluation.Mq_Mq_representor_innerprods[q, i, last] = \
                    self.X_inner_product(Mq_representor[q1][i], Mq_representor[q2][last])
                evaluation.Mq_Mq_representor_innerprods[q, last, i] = \
                    self.X_inner_product(Mq_representor[q1][last], Mq_representor[q2][i])

        for q_a in range(qa):
            for q_m in range(qm):
                for i in range(_N):
                    evaluation.Aq_Mq_representor_innerprods[q_a, q_m, i, last] = \
                        self.X_inner_product(Aq_representor[q_a][i], Mq_representor[q_m][last])
                    evaluation.Aq_Mq_representor_innerprods[q_a, q_m, last, i] = \
                        self.X_inner_product(Aq_representor[q_a][last], Mq_representor[q_m][i])

        return

    def _initial_condition_projector(self, _N):
        if _N > len(self.M_basis):
            return None
        return self.project_initial_condition(_N)

    def project_initial_condition(self, _N):
        """L2 projection of the initial condition onto the first _N basis functions

        :param _N: basis size
        :type _N: int
        :return: coefficients of the projection and L2 norm of the projection error
        :rtype: tuple(numpy.ndarray, float)
        """

        if _N > len(self.M_basis):
            logger.critical(f"Impossible to project the initial condition onto {_N} basis functions; "
                            f"only {len(self.M_basis)} are available")
            raise ValueError("Not enough basis functions")

        basis = np.array(self.M_basis[:_N]).T
        L2_basis = np.column_stack([arr_utils.matrix_vector_mul(self.M_L2_matrix, basis[:, i]) for i in range(_N)])

        coefficients = np.linalg.solve(basis.T.dot(L2_basis), L2_basis.T.dot(self.M_initial_condition))
        error = self.M_initial_condition - basis.dot(coefficients)
        L2_error = np.sqrt(np.abs(arr_utils.mydot(error, error, self.M_L2_matrix)))

        return coefficients, L2_error

    def reconstruct_solution(self, _coefficients):
        """High-fidelity function associated to the reduced coefficients _coefficients
        """
        return np.array(self.M_basis[:len(_coefficients)]).T.dot(_coefficients)

    def truth_residual_dual_norm(self, _solution, _old_solution):
        """Dual norm of the time-discrete residual of the reduced solutions _solution and _old_solution, computed in
        the high-fidelity space at the current parameter of the evaluation. It is meant to check the values returned
        by the online residual engine.

        :param _solution: reduced solution at the current time step
        :type _solution: numpy.ndarray
        :param _old_solution: reduced solution at the previous time step
        :type _old_solution: numpy.ndarray
        :return: dual norm of the residual
        :rtype: float
        """

        evaluation = self.M_rb_evaluation
        theta = evaluation.temporal_discretization.euler_theta
        dt = evaluation.temporal_discretization.delta_t
        theta_a, theta_f, theta_m = evaluation.get_theta_a(), evaluation.get_theta_f(), evaluation.get_theta_m()

        u_theta = self.reconstruct_solution(theta * _solution + (1.0 - theta) * _old_solution)
        u_diff = self.reconstruct_solution((_solution - _old_solution) / dt)

        residual = sum(theta_f[q] * self.M_Fq[q] for q in range(len(self.M_Fq)))
        for q, Aq in enumerate(self.M_Aq):
            residual = residual - theta_a[q] * arr_utils.matrix_vector_mul(Aq, u_theta)
        for q, Mq in enumerate(self.M_Mq):
            residual = residual - theta_m[q] * arr_utils.matrix_vector_mul(Mq, u_diff)

        representor = arr_utils.solve_inner_product_system(self.M_X, residual)
        return np.sqrt(np.abs(residual.dot(representor)))

    @property
    def basis(self):
        return self.M_basis

    @property
    def N(self):
        return len(self.M_basis)


__all__ = [
    "TransientRBConstruction"
]
