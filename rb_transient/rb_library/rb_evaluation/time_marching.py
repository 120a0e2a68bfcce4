#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Mar 18 09:31:47 2024

Strategies driving the assembly of the reduced operators and the evaluation of the residual dual norms along the
time marching performed by :class:`~transient_rb_evaluation.TransientRBEvaluation`.
"""

import numpy as np
import os

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


class TimeMarching:
    """Base class of the time marching strategies. At the beginning of a solve
    :func:`~time_marching.TimeMarching.initialize` is called; then, at each time step k > 0,
    :func:`~time_marching.TimeMarching.step_operators` returns the left-hand side matrix, the matrix multiplying the
    previous solution and the right-hand side vector of the reduced system, and
    :func:`~time_marching.TimeMarching.residual_dual_norm` returns the dual norm of the residual of the newly computed
    solution. :func:`~time_marching.TimeMarching.finalize` is called at the end of the solve, also if it fails.
    """

    def initialize(self, _evaluation, _N):
        return

    def step_operators(self, _evaluation, _N, _k):
        raise NotImplementedError("This method is not implemented by this class")

    def residual_dual_norm(self, _evaluation, _N):
        raise NotImplementedError("This method is not implemented by this class")

    def finalize(self, _evaluation):
        return


class LTITimeMarching(TimeMarching):
    """Time marching for linear time-invariant problems: the parameter value is the same at all the time steps, so
    that the reduced operators are assembled once and the parameter-dependent terms of the residual dual norm are
    cached at the beginning of the solve
    """

    def __init__(self):
        self.M_operators = None
        return

    def initialize(self, _evaluation, _N):
        self.M_operators = _evaluation.assemble_reduced_operators(_N)
        _evaluation.cache_online_residual_terms(_N)
        return

    def step_operators(self, _evaluation, _N, _k):
        return self.M_operators

    def residual_dual_norm(self, _evaluation, _N):
        return _evaluation.compute_residual_dual_norm(_N)

    def finalize(self, _evaluation):
        self.M_operators = None
        return


class TimeVaryingTimeMarching(TimeMarching):
    """Time marching for problems whose parameter value changes in time. At the k-th time step the parameter is
    evaluated at t_{k-1} + theta * delta_t, the reduced operators are assembled anew and the residual dual norm is
    computed without relying on cached terms. The parameter value set before the solve is restored at its end.
    """

    def __init__(self, _parameter_schedule):
        """Initialization of the strategy

        :param _parameter_schedule: function of time, returning the parameter value at that time
        :type _parameter_schedule: callable
        """

        self.M_parameter_schedule = _parameter_schedule
        self.M_initial_param = None
        return

    def initialize(self, _evaluation, _N):
        self.M_initial_param = np.copy(_evaluation.get_parameters())
        _evaluation.set_parameters(self.M_parameter_schedule(0.0))
        return

    def step_operators(self, _evaluation, _N, _k):
        temporal_discretization = _evaluation.temporal_discretization
        time = temporal_discretization.get_time(_k - 1) + \
            temporal_discretization.euler_theta * temporal_discretization.delta_t
        _evaluation.set_parameters(self.M_parameter_schedule(time))
        logger.debug(f"Time step {_k}: parameter {_evaluation.get_parameters()} at time {time}")
        return _evaluation.assemble_reduced_operators(_N)

    def residual_dual_norm(self, _evaluation, _N):
        return _evaluation.uncached_compute_residual_dual_norm(_N)

    def finalize(self, _evaluation):
        if self.M_initial_param is not None:
            _evaluation.set_parameters(self.M_initial_param)
            self.M_initial_param = None
        return

    @property
    def parameter_schedule(self):
        return self.M_parameter_schedule


__all__ = [
    "TimeMarching",
    "LTITimeMarching",
    "TimeVaryingTimeMarching"
]
