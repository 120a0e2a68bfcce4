#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Mar 19 10:14:55 2024
"""

import numpy as np
import os

import rb_transient.utils.array_utils as arr_utils
import rb_transient.utils.errors as err
import rb_transient.rb_library.rb_evaluation.error_bound as eb
import rb_transient.rb_library.rb_evaluation.offline_data_io as odio

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


def symmetric_products(_theta1, _theta2=None):
    """Generator over the pairs (q1, q2), q1 <= q2, of the affine components of a symmetric table of inner products,
    packed in row-major upper triangular order. For each pair, it yields the packed index, q1, q2 and the weight of
    the pair in the expansion of the squared norm, i.e. theta1[q1] * theta2[q2], doubled if q1 != q2.

    :param _theta1: theta coefficients associated to the row index
    :type _theta1: numpy.ndarray
    :param _theta2: theta coefficients associated to the column index. If None, _theta1 is used. Defaults to None
    :type _theta2: numpy.ndarray or NoneType
    """

    _theta2 = _theta1 if _theta2 is None else _theta2
    Q = len(_theta1)
    q = 0
    for q1 in range(Q):
        for q2 in range(q1, Q):
            delta = 1.0 if q1 == q2 else 2.0
            yield q, q1, q2, delta * _theta1[q1] * _theta2[q2]
            q += 1


def clipped_dual_norm(_squared_norm, _name="residual"):
    """Square root of a squared dual norm. Negative values, arising from round-off when the dual norm is close to
    zero, are replaced by their absolute value
    """

    if _squared_norm < 0.0:
        logger.warning(f"Negative squared {_name} dual norm {_squared_norm}, most likely caused by round-off errors. "
                       f"Its absolute value is taken")
        _squared_norm = np.abs(_squared_norm)

    return np.sqrt(_squared_norm)


class RBEvaluation:
    """Class performing the online evaluation of a steady, affinely parametrized, coercive problem via a reduced
    basis: it stores the reduced affine components of the operators and the inner products of their Riesz
    representors, it solves the reduced problem for a given basis size and it computes the a posteriori error bounds
    on the solution and on the outputs.

    The data structures are indexed by the basis size and grow via
    :func:`~rb_evaluation.RBEvaluation.resize_data_structures`; they are filled by an offline collaborator (see
    :class:`~transient_rb_construction.TransientRBConstruction`) or read from files.
    """

    def __init__(self, _affine_problem, _affine_decomposition):
        """Initialization of the RB evaluation

        :param _affine_problem: problem providing the theta functions, the current parameter and the stability lower
            bound
        :type _affine_problem: AffineProblem
        :param _affine_decomposition: numbers of affine components of the operators
        :type _affine_decomposition: AffineDecomposition
        """

        self.M_affine_problem = _affine_problem
        self.M_affine_decomposition = _affine_decomposition

        if self.M_affine_problem.n_outputs != self.M_affine_decomposition.n_outputs:
            logger.critical(f"The problem features {self.M_affine_problem.n_outputs} outputs, while the affine "
                            f"decomposition features {self.M_affine_decomposition.n_outputs}")
            raise ValueError("Inconsistent number of outputs")

        self.M_N_max = 0
        self.M_error_bound_formula = eb.CoerciveErrorBound()
        self.M_initial_condition_projector = None

        self.M_RB_solution = np.zeros(0)
        self.M_RB_outputs = np.zeros(self.n_outputs)
        self.M_RB_output_error_bounds = np.zeros(self.n_outputs)

        self._reset_data_structures()

        return

    def _reset_data_structures(self):
        qa, qf = self.M_affine_decomposition.qa, self.M_affine_decomposition.qf
        ql = self.M_affine_decomposition.ql

        self.M_N_max = 0

        self.M_RB_Aq_vector = np.zeros((qa, 0, 0))
        self.M_RB_Fq_vector = np.zeros((qf, 0))
        self.M_RB_output_vectors = [np.zeros((ql[n], 0)) for n in range(self.n_outputs)]

        self.M_Fq_representor_innerprods = np.zeros(arr_utils.n_triangular(qf))
        self.M_Fq_Aq_representor_innerprods = np.zeros((qf, qa, 0))
        self.M_Aq_Aq_representor_innerprods = np.zeros((arr_utils.n_triangular(qa), 0, 0))
        self.M_output_dual_innerprods = [np.zeros(arr_utils.n_triangular(ql[n])) for n in range(self.n_outputs)]

        self.M_Aq_representor = [[] for _ in range(qa)]
        self.M_Fq_representor = [None] * qf

        return

    def _grow_data_structures(self, _N_max):
        """Enlarges the basis-size-indexed data structures to _N_max, keeping their entries. It is extended by the
        derived classes to grow their own data structures
        """

        qa, qf = self.M_affine_decomposition.qa, self.M_affine_decomposition.qf

        self.M_RB_Aq_vector = arr_utils.grow_array(self.M_RB_Aq_vector, (qa, _N_max, _N_max))
        self.M_RB_Fq_vector = arr_utils.grow_array(self.M_RB_Fq_vector, (qf, _N_max))
        self.M_RB_output_vectors = [arr_utils.grow_array(output_vectors, (output_vectors.shape[0], _N_max))
                                    for output_vectors in self.M_RB_output_vectors]

        self.M_Fq_Aq_representor_innerprods = arr_utils.grow_array(self.M_Fq_Aq_representor_innerprods,
                                                                   (qf, qa, _N_max))
        self.M_Aq_Aq_representor_innerprods = arr_utils.grow_array(self.M_Aq_Aq_representor_innerprods,
                                                                   (arr_utils.n_triangular(qa), _N_max, _N_max))
        return

    def resize_data_structures(self, _N_max):
        """Method to resize the data structures so that they can host bases of size up to _N_max. The entries related
        to smaller basis sizes are kept, so that the evaluations for those sizes are not affected. If _N_max does not
        exceed the current maximal basis size, nothing is done.

        :param _N_max: maximal basis size
        :type _N_max: int
        """

        if int(_N_max) != _N_max or _N_max < 0:
            logger.critical(f"Invalid maximal basis size {_N_max}")
            raise ValueError("The maximal basis size must be a non-negative integer")

        if _N_max <= self.M_N_max:
            logger.debug(f"The data structures already host bases of size up to {self.M_N_max}")
            return

        logger.info(f"Resizing the RB data structures from N_max={self.M_N_max} to N_max={_N_max}")
        self._grow_data_structures(int(_N_max))
        self.M_N_max = int(_N_max)

        return

    def get_n_basis_functions(self):
        return self.M_N_max

    def check_N(self, _N):
        """Checks that _N is a valid basis size, i.e. an integer in [1, N_max]

        :raises ValueError: if _N is not a valid basis size
        """

        if int(_N) != _N or not 0 < _N <= self.M_N_max:
            logger.critical(f"Invalid basis size N={_N}; the maximal basis size is {self.M_N_max}")
            raise ValueError(f"The basis size must be an integer in [1, {self.M_N_max}]")
        return

    def set_parameters(self, _param):
        self.M_affine_problem.parameter_handler.assign_parameters(_param)
        return

    def get_parameters(self):
        return self.M_affine_problem.param

    @staticmethod
    def _check_theta(_theta, _Q, _name):
        if _theta.shape[0] != _Q:
            logger.critical(f"The theta functions of {_name} return {_theta.shape[0]} values, "
                            f"while {_Q} affine components are stored")
            raise ValueError(f"Inconsistent number of affine components for {_name}")
        return _theta

    def get_theta_a(self):
        return self._check_theta(self.M_affine_problem.get_full_theta_a(self.get_parameters()),
                                 self.M_affine_decomposition.qa, 'A')

    def get_theta_f(self):
        return self._check_theta(self.M_affine_problem.get_full_theta_f(self.get_parameters()),
                                 self.M_affine_decomposition.qf, 'f')

    def get_theta_output(self, _n):
        return self._check_theta(self.M_affine_problem.get_full_theta_output(self.get_parameters(), _n),
                                 self.M_affine_decomposition.ql[_n], f'output {_n}')

    def get_stability_lower_bound(self):
        """Lower bound of the coercivity constant at the current parameter value
        """
        return self.M_affine_problem.get_stability_lower_bound(self.get_parameters())

    def set_error_bound_formula(self, _error_bound_formula):
        """Setter method for the formula converting the residual dual norms into error bounds

        :param _error_bound_formula: the error bound formula
        :type _error_bound_formula: ErrorBoundFormula
        """
        self.M_error_bound_formula = _error_bound_formula
        return

    def residual_scaling_numer(self, _alpha_LB):
        return self.M_error_bound_formula.residual_scaling_numer(_alpha_LB)

    def residual_scaling_denom(self, _alpha_LB):
        return self.M_error_bound_formula.residual_scaling_denom(_alpha_LB)

    def set_initial_condition_projector(self, _projector):
        """Setter method for the projection of the initial condition onto the reduced basis. The projector takes a
        basis size N and returns the N coefficients of the projection and the L2 norm of the projection error, or
        None if fewer than N basis functions are available; in that case zero placeholders are stored.

        :param _projector: the projector, or None to use zero placeholders
        :type _projector: callable or NoneType
        """
        self.M_initial_condition_projector = _projector
        return

    def assemble_A_N(self, _N, _theta_a=None):
        theta_a = self.get_theta_a() if _theta_a is None else _theta_a
        return np.einsum('q,qij->ij', theta_a, self.M_RB_Aq_vector[:, :_N, :_N])

    def assemble_F_N(self, _N, _theta_f=None):
        theta_f = self.get_theta_f() if _theta_f is None else _theta_f
        return self.M_RB_Fq_vector[:, :_N].T.dot(theta_f)

    def compute_outputs(self, _N, _solution):
        """Values of all the outputs at the current parameter, for the reduced solution _solution of size _N

        :return: values of the outputs
        :rtype: numpy.ndarray
        """

        outputs = np.zeros(self.n_outputs)
        for n in range(self.n_outputs):
            outputs[n] = self.get_theta_output(n).dot(self.M_RB_output_vectors[n][:, :_N].dot(_solution))
        return outputs

    def eval_output_dual_norm(self, _n, _param=None):
        """Dual norm of the output functional of index _n, at the parameter value _param

        :param _n: index of the output
        :type _n: int
        :param _param: parameter value. If None, the current parameter is used. Defaults to None
        :type _param: numpy.ndarray or NoneType
        :return: dual norm of the output functional
        :rtype: float
        """

        if _param is None:
            theta_l = self.get_theta_output(_n)
        else:
            theta_l = self._check_theta(self.M_affine_problem.get_full_theta_output(_param, _n),
                                        self.M_affine_decomposition.ql[_n], f'output {_n}')

        output_bound_sq = 0.0
        for q, _, _, weight in symmetric_products(theta_l):
            output_bound_sq += weight * self.M_output_dual_innerprods[_n][q]

        return clipped_dual_norm(output_bound_sq, f"output {_n}")

    def compute_Fq_term(self, _theta_f):
        Fq_term = 0.0
        for q, _, _, weight in symmetric_products(_theta_f):
            Fq_term += weight * self.M_Fq_representor_innerprods[q]
        return Fq_term

    def compute_Fq_Aq_vector(self, _theta_f, _theta_a, _N):
        return 2.0 * np.einsum('f,a,fan->n', _theta_f, _theta_a, self.M_Fq_Aq_representor_innerprods[:, :, :_N])

    def compute_Aq_Aq_matrix(self, _theta_a, _N):
        Aq_Aq_matrix = np.zeros((_N, _N))
        for q, _, _, weight in symmetric_products(_theta_a):
            Aq_Aq_matrix += weight * self.M_Aq_Aq_representor_innerprods[q, :_N, :_N]
        return Aq_Aq_matrix

    def compute_residual_dual_norm(self, _N):
        """Dual norm of the residual of the steady problem, for the reduced solution currently stored

        :param _N: basis size
        :type _N: int
        :return: dual norm of the residual
        :rtype: float
        :raises ValueError: if _N is not a valid basis size or no reduced solution of size _N is stored
        """

        self.check_N(_N)
        if self.M_RB_solution.shape != (_N,):
            logger.critical(f"The stored reduced solution has size {self.M_RB_solution.shape[0]}, "
                            f"while N={_N} is requested")
            raise ValueError(f"No reduced solution of size N={_N} is stored")

        theta_a, theta_f = self.get_theta_a(), self.get_theta_f()
        u = self.M_RB_solution

        residual_norm_sq = self.compute_Fq_term(theta_f)
        residual_norm_sq += u.dot(self.compute_Fq_Aq_vector(theta_f, theta_a, _N))
        residual_norm_sq += u.dot(self.compute_Aq_Aq_matrix(theta_a, _N).dot(u))

        return clipped_dual_norm(residual_norm_sq)

    def rb_solve(self, _N):
        """Solves the steady reduced problem of size _N at the current parameter, computing the outputs and the error
        bounds on the solution and on the outputs

        :param _N: basis size
        :type _N: int
        :return: error bound on the solution
        :rtype: float
        """

        self.check_N(_N)

        A_N = self.assemble_A_N(_N)
        F_N = self.assemble_F_N(_N)

        try:
            self.M_RB_solution = arr_utils.solve_dense_system(A_N, F_N)
        except np.linalg.LinAlgError as e:
            logger.error(f"Failed to solve the reduced problem of size N={_N}: {e}")
            raise err.RBSolveError(f"Failed to solve the reduced problem of size N={_N}: {e}", N=_N)

        self.M_RB_outputs = self.compute_outputs(_N, self.M_RB_solution)

        epsilon_N = self.compute_residual_dual_norm(_N)
        alpha_LB = self.get_stability_lower_bound()
        formula = self.M_error_bound_formula
        error_bound = formula.bound(formula.accumulate(formula.initial_bound_sum(0.0), epsilon_N, alpha_LB))

        self.M_RB_output_error_bounds = np.array([formula.output_bound(self.eval_output_dual_norm(n), error_bound)
                                                  for n in range(self.n_outputs)])

        logger.debug(f"Steady RB solve with N={_N}: residual dual norm {epsilon_N}, error bound {error_bound}")
        return error_bound

    def clear_riesz_representors(self):
        """Releases the Riesz representors, keeping their inner products
        """

        self.M_Aq_representor = [[] for _ in range(self.M_affine_decomposition.qa)]
        self.M_Fq_representor = [None] * self.M_affine_decomposition.qf
        return

    def clear(self):
        """Clears all the data structures, bringing the maximal basis size back to 0
        """

        self._reset_data_structures()
        self.M_RB_solution = np.zeros(0)
        self.M_RB_outputs = np.zeros(self.n_outputs)
        self.M_RB_output_error_bounds = np.zeros(self.n_outputs)
        return

    def _structural_manifest(self):
        manifest = {'n_outputs': self.n_outputs}
        manifest.update(self.M_affine_decomposition.as_dict())
        return manifest

    def _offline_manifest(self):
        manifest = {'N': self.M_N_max}
        manifest.update(self._structural_manifest())
        return manifest

    def _offline_artifacts(self):
        artifacts = {'RB_Aq_vector': self.M_RB_Aq_vector,
                     'RB_Fq_vector': self.M_RB_Fq_vector,
                     'Fq_norms': self.M_Fq_representor_innerprods,
                     'Fq_Aq_norms': self.M_Fq_Aq_representor_innerprods,
                     'Aq_Aq_norms': self.M_Aq_Aq_representor_innerprods}
        for n in range(self.n_outputs):
            artifacts[f'output_{n}_vectors'] = self.M_RB_output_vectors[n]
            artifacts[f'output_{n}_dual_innerprods'] = self.M_output_dual_innerprods[n]
        return artifacts

    def _expected_offline_shapes(self, _N, _manifest):
        qa, qf = self.M_affine_decomposition.qa, self.M_affine_decomposition.qf
        ql = self.M_affine_decomposition.ql

        shapes = {'RB_Aq_vector': (qa, _N, _N),
                  'RB_Fq_vector': (qf, _N),
                  'Fq_norms': (arr_utils.n_triangular(qf),),
                  'Fq_Aq_norms': (qf, qa, _N),
                  'Aq_Aq_norms': (arr_utils.n_triangular(qa), _N, _N)}
        for n in range(self.n_outputs):
            shapes[f'output_{n}_vectors'] = (ql[n], _N)
            shapes[f'output_{n}_dual_innerprods'] = (arr_utils.n_triangular(ql[n]),)
        return shapes

    def _check_offline_manifest(self, _manifest):
        """Checks that the numbers of affine components stored in the manifest match the ones of the problem

        :raises OfflineDataError: if the numbers of affine components do not match
        """

        expected = self._structural_manifest()
        for key in expected:
            value = odio.manifest_entry(_manifest, key, list if key == 'Q_l' else int)
            if value != expected[key]:
                logger.critical(f"The offline data feature {key}={value}, while the problem features "
                                f"{key}={expected[key]}")
                raise err.OfflineDataError(f"Inconsistent entry '{key}' in the manifest", artifact=odio.MANIFEST_FILE)
        return

    def _stage_offline_scalars(self, _manifest):
        return dict()

    def _install_offline_data(self, _N, _staged, _scalars):
        self._reset_data_structures()

        self.M_RB_Aq_vector = _staged['RB_Aq_vector']
        self.M_RB_Fq_vector = _staged['RB_Fq_vector']
        self.M_Fq_representor_innerprods = _staged['Fq_norms']
        self.M_Fq_Aq_representor_innerprods = _staged['Fq_Aq_norms']
        self.M_Aq_Aq_representor_innerprods = _staged['Aq_Aq_norms']
        self.M_RB_output_vectors = [_staged[f'output_{n}_vectors'] for n in range(self.n_outputs)]
        self.M_output_dual_innerprods = [_staged[f'output_{n}_dual_innerprods'] for n in range(self.n_outputs)]

        self.M_N_max = _N
        self.M_RB_solution = np.zeros(0)
        return

    def write_offline_data_to_files(self, directory="offline_data"):
        """Method to save the offline quantities in the given directory, so that the online evaluation can be carried
        out in a later session via :func:`~rb_evaluation.RBEvaluation.read_offline_data_from_files`. The Riesz
        representors are not saved.

        :param directory: path to the directory. Defaults to 'offline_data'
        :type directory: str
        :raises OfflineDataError: if the data cannot be written
        """

        logger.info(f"Saving the offline data with N_max={self.M_N_max} in {directory}")
        odio.write_offline_data(directory, self._offline_manifest(), self._offline_artifacts())
        return

    def read_offline_data_from_files(self, directory="offline_data"):
        """Method to read the offline quantities saved via
        :func:`~rb_evaluation.RBEvaluation.write_offline_data_to_files`. All the files are read and checked before
        any data is installed: if the reading fails, the current state is left untouched.

        :param directory: path to the directory. Defaults to 'offline_data'
        :type directory: str
        :raises OfflineDataError: if the directory or some file is missing, corrupt or inconsistent
        """

        logger.info(f"Reading the offline data from {directory}")

        manifest = odio.read_manifest(directory)
        N = odio.manifest_entry(manifest, 'N')
        if N < 0:
            raise err.OfflineDataError(f"Invalid basis size {N} in the manifest", artifact=odio.MANIFEST_FILE)
        self._check_offline_manifest(manifest)
        scalars = self._stage_offline_scalars(manifest)
        staged = odio.read_offline_arrays(directory, self._expected_offline_shapes(N, manifest))

        self._install_offline_data(N, staged, scalars)

        logger.info(f"Offline data with N_max={N} read from {directory}")
        return

    @property
    def N_max(self):
        return self.M_N_max

    @property
    def n_outputs(self):
        return self.M_affine_decomposition.n_outputs

    @property
    def affine_problem(self):
        return self.M_affine_problem

    @property
    def affine_decomposition(self):
        return self.M_affine_decomposition

    @property
    def error_bound_formula(self):
        return self.M_error_bound_formula

    @property
    def RB_solution(self):
        return self.M_RB_solution

    @property
    def RB_outputs(self):
        return self.M_RB_outputs

    @property
    def RB_output_error_bounds(self):
        return self.M_RB_output_error_bounds

    @property
    def RB_Aq_vector(self):
        return self.M_RB_Aq_vector

    @property
    def RB_Fq_vector(self):
        return self.M_RB_Fq_vector

    @property
    def RB_output_vectors(self):
        return self.M_RB_output_vectors

    @property
    def Fq_representor_innerprods(self):
        return self.M_Fq_representor_innerprods

    @property
    def Fq_Aq_representor_innerprods(self):
        return self.M_Fq_Aq_representor_innerprods

    @property
    def Aq_Aq_representor_innerprods(self):
        return self.M_Aq_Aq_representor_innerprods

    @property
    def output_dual_innerprods(self):
        return self.M_output_dual_innerprods

    @property
    def Aq_representor(self):
        return self.M_Aq_representor

    @property
    def Fq_representor(self):
        return self.M_Fq_representor


__all__ = [
    "symmetric_products",
    "clipped_dual_norm",
    "RBEvaluation"
]
