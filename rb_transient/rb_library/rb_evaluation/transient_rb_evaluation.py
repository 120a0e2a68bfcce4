#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Wed Mar 20 11:37:02 2024
"""

import numpy as np
import os

import rb_transient.utils.array_utils as arr_utils
import rb_transient.utils.errors as err
import rb_transient.rb_library.temporal_discretization as td
import rb_transient.rb_library.rb_evaluation.error_bound as eb
import rb_transient.rb_library.rb_evaluation.lti_residual_cache as lrc
import rb_transient.rb_library.rb_evaluation.offline_data_io as odio
import rb_transient.rb_library.rb_evaluation.rb_evaluation as rbe
import rb_transient.rb_library.rb_evaluation.time_marching as tm

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


class TransientRBEvaluation(rbe.RBEvaluation):
    """Class performing the online evaluation of a linear time-invariant parabolic problem, discretized in time via
    the generalized theta method

        (M_N / delta_t + theta A_N) u_k = (M_N / delta_t - (1 - theta) A_N) u_{k-1} + F_N

    where M_N, A_N and F_N are the affine sums of the reduced mass operators, stiffness operators and right-hand side
    vectors. It inherits from :class:`~rb_evaluation.RBEvaluation`, adding the mass operator, the initial condition
    and the time-dependent error bounds, computed from the dual norms of the time-discrete residuals

        r_k(v) = F(v) - A(theta u_k + (1 - theta) u_{k-1}, v) - M((u_k - u_{k-1}) / delta_t, v)

    The Riesz representors r of the affine components satisfy X r_F = F_q, X r_A = -A_q phi_i, X r_M = M_q phi_i,
    X being the inner product matrix of the high-fidelity space.
    """

    def __init__(self, _affine_problem, _affine_decomposition, _temporal_discretization=None):
        """Initialization of the transient RB evaluation

        :param _affine_problem: problem providing the theta functions (mass operator included), the current parameter
            and the stability lower bound
        :type _affine_problem: AffineProblemUnsteady
        :param _affine_decomposition: numbers of affine components of the operators, mass operator included
        :type _affine_decomposition: AffineDecompositionUnsteady
        :param _temporal_discretization: temporal discretization. If None, a default one is built. Defaults to None
        :type _temporal_discretization: TemporalDiscretization or NoneType
        """

        self.M_temporal_discretization = _temporal_discretization if _temporal_discretization is not None \
            else td.TemporalDiscretization()
        self.M_lti_cache = lrc.LTIResidualCache()
        self.M_time_marching = tm.LTITimeMarching()

        super().__init__(_affine_problem, _affine_decomposition)

        self.M_error_bound_formula = eb.TransientL2ErrorBound(self.M_temporal_discretization)

        self.M_old_RB_solution = np.zeros(0)
        self._reset_trajectories()

        return

    def _reset_trajectories(self):
        self.M_RB_outputs_all_k = np.zeros((0, self.n_outputs))
        self.M_RB_output_error_bounds_all_k = np.zeros((0, self.n_outputs))
        self.M_RB_temporal_solution_data = np.zeros((0, 0))
        self.M_error_bound_all_k = np.zeros(0)
        return

    def _reset_data_structures(self):
        super()._reset_data_structures()

        qa, qf = self.M_affine_decomposition.qa, self.M_affine_decomposition.qf
        qm = self.M_affine_decomposition.qm

        self.M_RB_L2_matrix = np.zeros((0, 0))
        self.M_RB_M_q_vector = np.zeros((qm, 0, 0))

        self.M_Fq_Mq_representor_innerprods = np.zeros((qf, qm, 0))
        self.M_Mq_Mq_representor_innerprods = np.zeros((arr_utils.n_triangular(qm), 0, 0))
        self.M_Aq_Mq_representor_innerprods = np.zeros((qa, qm, 0, 0))

        self.M_initial_L2_error_all_N = np.zeros(0)
        self.M_RB_initial_condition_all_N = []

        self.M_M_q_representor = [[] for _ in range(qm)]
        self.M_lti_cache.invalidate()

        return

    @staticmethod
    def _check_initial_condition(_N, _coefficients, _L2_error):
        coefficients = np.array(_coefficients, dtype=float).ravel()
        if coefficients.shape != (_N,) or not _L2_error >= 0.0:
            logger.critical(f"The projection of the initial condition for N={_N} has {coefficients.shape[0]} "
                            f"coefficients and error {_L2_error}")
            raise ValueError(f"Invalid projection of the initial condition for N={_N}")
        return coefficients, float(_L2_error)

    def _project_initial_condition(self, _N):
        """Projection of the initial condition for the basis size _N. Zero placeholders are returned if no projector
        is set or if the projector cannot project onto _N basis functions yet (i.e. it returns None)
        """

        projection = self.M_initial_condition_projector(_N) if self.M_initial_condition_projector is not None \
            else None

        if projection is None:
            return np.zeros(_N), 0.0

        return self._check_initial_condition(_N, *projection)

    def set_initial_condition(self, _N, _coefficients, _L2_error):
        """Setter method for the projection of the initial condition onto the first _N basis functions, overwriting
        the entry of the basis size _N

        :param _N: basis size
        :type _N: int
        :param _coefficients: the _N coefficients of the projection
        :type _coefficients: numpy.ndarray
        :param _L2_error: L2 norm of the projection error
        :type _L2_error: float
        :raises ValueError: if _N is not a valid basis size or the projection is inconsistent
        """

        self.check_N(_N)
        coefficients, L2_error = self._check_initial_condition(_N, _coefficients, _L2_error)

        self.M_RB_initial_condition_all_N[_N - 1] = coefficients
        self.M_initial_L2_error_all_N[_N - 1] = L2_error
        return

    def _grow_data_structures(self, _N_max):
        projections = [self._project_initial_condition(N) for N in range(self.M_N_max + 1, _N_max + 1)]

        super()._grow_data_structures(_N_max)

        qa, qf = self.M_affine_decomposition.qa, self.M_affine_decomposition.qf
        qm = self.M_affine_decomposition.qm

        self.M_RB_L2_matrix = arr_utils.grow_array(self.M_RB_L2_matrix, (_N_max, _N_max))
        self.M_RB_M_q_vector = arr_utils.grow_array(self.M_RB_M_q_vector, (qm, _N_max, _N_max))

        self.M_Fq_Mq_representor_innerprods = arr_utils.grow_array(self.M_Fq_Mq_representor_innerprods,
                                                                   (qf, qm, _N_max))
        self.M_Mq_Mq_representor_innerprods = arr_utils.grow_array(self.M_Mq_Mq_representor_innerprods,
                                                                   (arr_utils.n_triangular(qm), _N_max, _N_max))
        self.M_Aq_Mq_representor_innerprods = arr_utils.grow_array(self.M_Aq_Mq_representor_innerprods,
                                                                   (qa, qm, _N_max, _N_max))

        initial_L2_error_all_N = arr_utils.grow_array(self.M_initial_L2_error_all_N, (_N_max,))
        for coefficients, L2_error in projections:
            initial_L2_error_all_N[len(self.M_RB_initial_condition_all_N)] = L2_error
            self.M_RB_initial_condition_all_N.append(coefficients)
        self.M_initial_L2_error_all_N = initial_L2_error_all_N

        return

    def get_theta_m(self):
        return self._check_theta(self.M_affine_problem.get_full_theta_m(self.get_parameters()),
                                 self.M_affine_decomposition.qm, 'M')

    def assemble_M_N(self, _N, _theta_m=None):
        theta_m = self.get_theta_m() if _theta_m is None else _theta_m
        return np.einsum('q,qij->ij', theta_m, self.M_RB_M_q_vector[:, :_N, :_N])

    def assemble_reduced_operators(self, _N):
        """Assembles the reduced operators of the generalized theta method at the current parameter

        :param _N: basis size
        :type _N: int
        :return: left-hand side matrix, matrix multiplying the solution at the previous time step and right-hand
            side vector
        :rtype: tuple(numpy.ndarray, numpy.ndarray, numpy.ndarray)
        """

        dt = self.M_temporal_discretization.delta_t
        theta = self.M_temporal_discretization.euler_theta

        M_N = self.assemble_M_N(_N)
        A_N = self.assemble_A_N(_N)
        F_N = self.assemble_F_N(_N)

        return M_N / dt + theta * A_N, M_N / dt - (1.0 - theta) * A_N, F_N

    def solve(self, _N):
        """Solves the reduced problem of size _N over all the time steps, at the current parameter, via the current
        time marching strategy. The trajectories of the solution, of the outputs and of the error bounds are stored.

        :param _N: basis size
        :type _N: int
        :return: error bound on the solution at the final time step
        :rtype: float
        :raises ValueError: if _N is not a valid basis size
        :raises RBSolveError: if the reduced system cannot be solved at some time step
        """

        self.check_N(_N)

        temporal_discretization = self.M_temporal_discretization
        K = temporal_discretization.n_time_steps
        formula = self.M_error_bound_formula

        self.M_RB_outputs_all_k = np.zeros((K + 1, self.n_outputs))
        self.M_RB_output_error_bounds_all_k = np.zeros((K + 1, self.n_outputs))
        self.M_RB_temporal_solution_data = np.zeros((K + 1, _N))
        self.M_error_bound_all_k = np.zeros(K + 1)

        temporal_discretization.set_time_step(0)
        self.M_RB_solution = np.copy(self.M_RB_initial_condition_all_N[_N - 1])
        self.M_old_RB_solution = np.copy(self.M_RB_solution)

        strategy = self.M_time_marching
        try:
            strategy.initialize(self, _N)

            bound_sum = formula.initial_bound_sum(self.M_initial_L2_error_all_N[_N - 1])
            self._store_time_step(_N, 0, formula.bound(bound_sum))

            for k in range(1, K + 1):
                lhs_matrix, rhs_matrix, rhs_vector = strategy.step_operators(self, _N, k)

                try:
                    new_solution = arr_utils.solve_dense_system(lhs_matrix,
                                                                rhs_matrix.dot(self.M_RB_solution) + rhs_vector)
                except np.linalg.LinAlgError as e:
                    logger.error(f"Failed to solve the reduced system of size N={_N} at time step {k}: {e}")
                    raise err.RBSolveError(f"Failed to solve the reduced system of size N={_N} at time step {k}: {e}",
                                           N=_N, time_step=k)

                self.M_old_RB_solution = self.M_RB_solution
                self.M_RB_solution = new_solution

                epsilon_N = strategy.residual_dual_norm(self, _N)
                bound_sum = formula.accumulate(bound_sum, epsilon_N, self.get_stability_lower_bound())
                self._store_time_step(_N, k, formula.bound(bound_sum))

                temporal_discretization.set_time_step(k)
        finally:
            strategy.finalize(self)

        logger.debug(f"Transient RB solve with N={_N} and {K} time steps: final error bound "
                     f"{self.M_error_bound_all_k[K]}")

        return self.M_error_bound_all_k[K]

    def rb_solve(self, _N):
        return self.solve(_N)

    def _store_time_step(self, _N, _k, _error_bound):
        self.M_RB_temporal_solution_data[_k] = self.M_RB_solution
        self.M_RB_outputs_all_k[_k] = self.compute_outputs(_N, self.M_RB_solution)
        self.M_error_bound_all_k[_k] = _error_bound
        for n in range(self.n_outputs):
            self.M_RB_output_error_bounds_all_k[_k, n] = \
                self.M_error_bound_formula.output_bound(self.eval_output_dual_norm(n), _error_bound)
        return

    def _residual_weights(self, _N):
        if self.M_RB_solution.shape != (_N,) or self.M_old_RB_solution.shape != (_N,):
            logger.critical(f"The stored reduced solutions have sizes {self.M_RB_solution.shape[0]} and "
                            f"{self.M_old_RB_solution.shape[0]}, while N={_N} is requested")
            raise ValueError(f"No reduced solutions of size N={_N} are stored")

        theta = self.M_temporal_discretization.euler_theta
        dt = self.M_temporal_discretization.delta_t

        u_theta = theta * self.M_RB_solution + (1.0 - theta) * self.M_old_RB_solution
        mass_coeffs = -(self.M_RB_solution - self.M_old_RB_solution) / dt

        return u_theta, mass_coeffs

    def uncached_compute_residual_dual_norm(self, _N):
        """Dual norm of the time-discrete residual of the current and previous reduced solutions, computed from the
        full affine expansion at the current parameter. It is valid also if the parameter changes in time.

        :param _N: basis size
        :type _N: int
        :return: dual norm of the residual
        :rtype: float
        """

        self.check_N(_N)
        u_theta, mass_coeffs = self._residual_weights(_N)
        theta_a, theta_f, theta_m = self.get_theta_a(), self.get_theta_f(), self.get_theta_m()

        residual_norm_sq = self.compute_Fq_term(theta_f)

        for q_f in range(len(theta_f)):
            for q_a in range(len(theta_a)):
                residual_norm_sq += 2.0 * theta_f[q_f] * theta_a[q_a] * \
                    u_theta.dot(self.M_Fq_Aq_representor_innerprods[q_f, q_a, :_N])
            for q_m in range(len(theta_m)):
                residual_norm_sq += 2.0 * theta_f[q_f] * theta_m[q_m] * \
                    mass_coeffs.dot(self.M_Fq_Mq_representor_innerprods[q_f, q_m, :_N])

        for q, _, _, weight in rbe.symmetric_products(theta_a):
            residual_norm_sq += weight * u_theta.dot(self.M_Aq_Aq_representor_innerprods[q, :_N, :_N].dot(u_theta))

        for q_a in range(len(theta_a)):
            for q_m in range(len(theta_m)):
                residual_norm_sq += 2.0 * theta_a[q_a] * theta_m[q_m] * \
                    u_theta.dot(self.M_Aq_Mq_representor_innerprods[q_a, q_m, :_N, :_N].dot(mass_coeffs))

        for q, _, _, weight in rbe.symmetric_products(theta_m):
            residual_norm_sq += weight * \
                mass_coeffs.dot(self.M_Mq_Mq_representor_innerprods[q, :_N, :_N].dot(mass_coeffs))

        return rbe.clipped_dual_norm(residual_norm_sq)

    def cache_online_residual_terms(self, _N):
        """Computes and caches the terms of the residual dual norm which depend on the parameter but not on the
        reduced solutions, for the current parameter and the basis size _N

        :param _N: basis size
        :type _N: int
        """

        self.check_N(_N)
        theta_a, theta_f, theta_m = self.get_theta_a(), self.get_theta_f(), self.get_theta_m()

        Mq_Mq_matrix = np.zeros((_N, _N))
        for q, _, _, weight in rbe.symmetric_products(theta_m):
            Mq_Mq_matrix += weight * self.M_Mq_Mq_representor_innerprods[q, :_N, :_N]

        self.M_lti_cache.store(self.get_parameters(), _N,
                               Fq_term=self.compute_Fq_term(theta_f),
                               Fq_Aq_vector=self.compute_Fq_Aq_vector(theta_f, theta_a, _N),
                               Aq_Aq_matrix=self.compute_Aq_Aq_matrix(theta_a, _N),
                               Fq_Mq_vector=2.0 * np.einsum('f,m,fmn->n', theta_f, theta_m,
                                                            self.M_Fq_Mq_representor_innerprods[:, :, :_N]),
                               Aq_Mq_matrix=2.0 * np.einsum('a,m,amij->ij', theta_a, theta_m,
                                                            self.M_Aq_Mq_representor_innerprods[:, :, :_N, :_N]),
                               Mq_Mq_matrix=Mq_Mq_matrix)
        return

    def compute_residual_dual_norm(self, _N):
        """Dual norm of the time-discrete residual of the current and previous reduced solutions, computed from the
        terms cached by :func:`~transient_rb_evaluation.TransientRBEvaluation.cache_online_residual_terms`

        :param _N: basis size
        :type _N: int
        :return: dual norm of the residual
        :rtype: float
        :raises StaleCacheError: if the cached terms do not refer to the current parameter and to _N
        """

        self.M_lti_cache.check(self.get_parameters(), _N)
        u_theta, mass_coeffs = self._residual_weights(_N)
        cache = self.M_lti_cache

        residual_norm_sq = cache.Fq_term + \
            u_theta.dot(cache.Fq_Aq_vector) + \
            u_theta.dot(cache.Aq_Aq_matrix.dot(u_theta)) + \
            mass_coeffs.dot(cache.Fq_Mq_vector) + \
            u_theta.dot(cache.Aq_Mq_matrix.dot(mass_coeffs)) + \
            mass_coeffs.dot(cache.Mq_Mq_matrix.dot(mass_coeffs))

        return rbe.clipped_dual_norm(residual_norm_sq)

    def set_time_marching(self, _time_marching):
        """Setter method for the time marching strategy

        :param _time_marching: the time marching strategy
        :type _time_marching: TimeMarching
        """
        self.M_time_marching = _time_marching
        return

    def clear_riesz_representors(self):
        super().clear_riesz_representors()
        self.M_M_q_representor = [[] for _ in range(self.M_affine_decomposition.qm)]
        return

    def clear(self):
        super().clear()
        self.M_old_RB_solution = np.zeros(0)
        self._reset_trajectories()
        return

    def _offline_manifest(self):
        manifest = super()._offline_manifest()
        manifest.update(self.M_temporal_discretization.as_dict())
        key = self.M_lti_cache.key
        manifest['lti_cache'] = {'param': list(key[0]), 'N': key[1]} if key is not None else None
        return manifest

    def _offline_artifacts(self):
        artifacts = super()._offline_artifacts()

        initial_conditions = np.zeros((self.M_N_max, self.M_N_max))
        for n, coefficients in enumerate(self.M_RB_initial_condition_all_N):
            initial_conditions[n, :n + 1] = coefficients

        artifacts.update({'RB_L2_matrix': self.M_RB_L2_matrix,
                          'RB_M_q_vector': self.M_RB_M_q_vector,
                          'Fq_Mq_norms': self.M_Fq_Mq_representor_innerprods,
                          'Mq_Mq_norms': self.M_Mq_Mq_representor_innerprods,
                          'Aq_Mq_norms': self.M_Aq_Mq_representor_innerprods,
                          'initial_L2_error': self.M_initial_L2_error_all_N,
                          'RB_initial_condition': initial_conditions})

        if self.M_lti_cache.key is not None:
            artifacts.update({'cached_Fq_term': np.array([self.M_lti_cache.Fq_term]),
                              'cached_Fq_Aq_vector': self.M_lti_cache.Fq_Aq_vector,
                              'cached_Aq_Aq_matrix': self.M_lti_cache.Aq_Aq_matrix,
                              'cached_Fq_Mq_vector': self.M_lti_cache.Fq_Mq_vector,
                              'cached_Aq_Mq_matrix': self.M_lti_cache.Aq_Mq_matrix,
                              'cached_Mq_Mq_matrix': self.M_lti_cache.Mq_Mq_matrix})
        return artifacts

    def _stage_offline_scalars(self, _manifest):
        scalars = super()._stage_offline_scalars(_manifest)

        try:
            scalars['temporal_discretization'] = td.TemporalDiscretization(
                _delta_t=odio.manifest_entry(_manifest, 'delta_t', float),
                _euler_theta=odio.manifest_entry(_manifest, 'euler_theta', float),
                _n_time_steps=odio.manifest_entry(_manifest, 'n_time_steps', int))
        except ValueError as e:
            raise err.OfflineDataError(f"Invalid temporal discretization in the manifest: {e}",
                                       artifact=odio.MANIFEST_FILE)

        lti_cache = _manifest.get('lti_cache')
        if lti_cache is not None:
            cache_N = odio.manifest_entry(lti_cache, 'N', int)
            if not 0 < cache_N <= odio.manifest_entry(_manifest, 'N', int):
                raise err.OfflineDataError(f"Invalid basis size {cache_N} of the cached residual terms",
                                           artifact=odio.MANIFEST_FILE)
            scalars['lti_cache'] = (np.array(odio.manifest_entry(lti_cache, 'param', list, float)), cache_N)

        return scalars

    def _expected_offline_shapes(self, _N, _manifest):
        shapes = super()._expected_offline_shapes(_N, _manifest)

        qa, qf = self.M_affine_decomposition.qa, self.M_affine_decomposition.qf
        qm = self.M_affine_decomposition.qm

        shapes.update({'RB_L2_matrix': (_N, _N),
                       'RB_M_q_vector': (qm, _N, _N),
                       'Fq_Mq_norms': (qf, qm, _N),
                       'Mq_Mq_norms': (arr_utils.n_triangular(qm), _N, _N),
                       'Aq_Mq_norms': (qa, qm, _N, _N),
                       'initial_L2_error': (_N,),
                       'RB_initial_condition': (_N, _N)})

        if _manifest.get('lti_cache') is not None:
            cache_N = odio.manifest_entry(_manifest['lti_cache'], 'N', int)
            shapes.update({'cached_Fq_term': (1,),
                           'cached_Fq_Aq_vector': (cache_N,),
                           'cached_Aq_Aq_matrix': (cache_N, cache_N),
                           'cached_Fq_Mq_vector': (cache_N,),
                           'cached_Aq_Mq_matrix': (cache_N, cache_N),
                           'cached_Mq_Mq_matrix': (cache_N, cache_N)})
        return shapes

    def _install_offline_data(self, _N, _staged, _scalars):
        super()._install_offline_data(_N, _staged, _scalars)

        self.M_RB_L2_matrix = _staged['RB_L2_matrix']
        self.M_RB_M_q_vector = _staged['RB_M_q_vector']
        self.M_Fq_Mq_representor_innerprods = _staged['Fq_Mq_norms']
        self.M_Mq_Mq_representor_innerprods = _staged['Mq_Mq_norms']
        self.M_Aq_Mq_representor_innerprods = _staged['Aq_Mq_norms']
        self.M_initial_L2_error_all_N = _staged['initial_L2_error']
        self.M_RB_initial_condition_all_N = [np.copy(_staged['RB_initial_condition'][n, :n + 1]) for n in range(_N)]

        temporal_discretization = _scalars['temporal_discretization']
        self.M_temporal_discretization.set_n_time_steps(temporal_discretization.n_time_steps)
        self.M_temporal_discretization.set_time_step(0)
        self.M_temporal_discretization.set_delta_t(temporal_discretization.delta_t)
        self.M_temporal_discretization.set_euler_theta(temporal_discretization.euler_theta)

        if 'lti_cache' in _scalars:
            cache_param, cache_N = _scalars['lti_cache']
            self.M_lti_cache.store(cache_param, cache_N,
                                   Fq_term=_staged['cached_Fq_term'][0],
                                   Fq_Aq_vector=_staged['cached_Fq_Aq_vector'],
                                   Aq_Aq_matrix=_staged['cached_Aq_Aq_matrix'],
                                   Fq_Mq_vector=_staged['cached_Fq_Mq_vector'],
                                   Aq_Mq_matrix=_staged['cached_Aq_Mq_matrix'],
                                   Mq_Mq_matrix=_staged['cached_Mq_Mq_matrix'])

        self.M_old_RB_solution = np.zeros(0)
        self._reset_trajectories()
        return

    @property
    def temporal_discretization(self):
        return self.M_temporal_discretization

    @property
    def time_marching(self):
        return self.M_time_marching

    @property
    def lti_cache(self):
        return self.M_lti_cache

    @property
    def old_RB_solution(self):
        return self.M_old_RB_solution

    @property
    def RB_outputs_all_k(self):
        return self.M_RB_outputs_all_k

    @property
    def RB_output_error_bounds_all_k(self):
        return self.M_RB_output_error_bounds_all_k

    @property
    def RB_temporal_solution_data(self):
        return self.M_RB_temporal_solution_data

    @property
    def error_bound_all_k(self):
        return self.M_error_bound_all_k

    @property
    def RB_L2_matrix(self):
        return self.M_RB_L2_matrix

    @property
    def RB_M_q_vector(self):
        return self.M_RB_M_q_vector

    @property
    def Fq_Mq_representor_innerprods(self):
        return self.M_Fq_Mq_representor_innerprods

    @property
    def Mq_Mq_representor_innerprods(self):
        return self.M_Mq_Mq_representor_innerprods

    @property
    def Aq_Mq_representor_innerprods(self):
        return self.M_Aq_Mq_representor_innerprods

    @property
    def initial_L2_error_all_N(self):
        return self.M_initial_L2_error_all_N

    @property
    def RB_initial_condition_all_N(self):
        return self.M_RB_initial_condition_all_N

    @property
    def M_q_representor(self):
        return self.M_M_q_representor


__all__ = [
    "TransientRBEvaluation"
]
