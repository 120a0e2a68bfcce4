#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Fri Mar 15 14:22:51 2024

Formulas converting the dual norms of the residuals into a posteriori error bounds. Each formula exposes the
scaling factors of the residual dual norm and the rule to accumulate the per-step contributions, so that the
evaluation classes only need to call them in sequence:

    bound_sum = formula.initial_bound_sum(e_0)
    bound_sum = formula.accumulate(bound_sum, eps_k, alpha_LB)   (for each time step k)
    Delta_k = formula.bound(bound_sum)
    Delta_k^l = formula.output_bound(output_dual_norm, Delta_k)
"""

import numpy as np
import os

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


class ErrorBoundFormula:
    """Base class of the error bound formulas. It implements the accumulation of the squared, scaled residual dual
    norms, while the scaling factors are left to the derived classes
    """

    def residual_scaling_numer(self, _alpha_LB):
        """Numerator of the factor multiplying the squared residual dual norm

        :param _alpha_LB: lower bound of the stability constant
        :type _alpha_LB: float
        :return: numerator of the scaling factor
        :rtype: float
        """
        raise NotImplementedError("This method is not implemented by this class")

    def residual_scaling_denom(self, _alpha_LB):
        """Denominator of the factor multiplying the squared residual dual norm

        :param _alpha_LB: lower bound of the stability constant
        :type _alpha_LB: float
        :return: denominator of the scaling factor
        :rtype: float
        """
        return _alpha_LB

    def initial_bound_sum(self, _initial_error):
        """Value of the bound accumulator before the first time step, given the error on the initial condition
        """
        return _initial_error ** 2

    def accumulate(self, _bound_sum, _residual_dual_norm, _alpha_LB):
        """Adds the contribution of the residual dual norm of a time step to the bound accumulator

        :param _bound_sum: current value of the accumulator
        :type _bound_sum: float
        :param _residual_dual_norm: dual norm of the residual at the current time step
        :type _residual_dual_norm: float
        :param _alpha_LB: lower bound of the stability constant
        :type _alpha_LB: float
        :return: updated value of the accumulator
        :rtype: float
        """
        return _bound_sum + (self.residual_scaling_numer(_alpha_LB) /
                             self.residual_scaling_denom(_alpha_LB)) * _residual_dual_norm ** 2

    def bound(self, _bound_sum):
        return np.sqrt(_bound_sum)

    def output_bound(self, _output_dual_norm, _solution_bound):
        """Error bound on an output, given the dual norm of the output functional and the error bound on the solution
        """
        return _output_dual_norm * _solution_bound


class TransientL2ErrorBound(ErrorBoundFormula):
    """L2 error bound of the generalized theta method for coercive LTI problems:

        Delta_k^2 = e_0^2 + (delta_t / alpha_LB) * sum_{j=1}^{k} eps_j^2

    where e_0 is the L2 projection error of the initial condition. The bound is non-decreasing in time.
    """

    def __init__(self, _temporal_discretization):
        """Initialization of the formula

        :param _temporal_discretization: temporal discretization, providing the time-step size
        :type _temporal_discretization: TemporalDiscretization
        """

        self.M_temporal_discretization = _temporal_discretization
        return

    def residual_scaling_numer(self, _alpha_LB):
        return self.M_temporal_discretization.delta_t


class CoerciveErrorBound(ErrorBoundFormula):
    """Error bound of steady coercive problems, Delta = eps / alpha_LB. Since steady problems have no
    history, the accumulator is overwritten at every call to accumulate
    """

    def residual_scaling_numer(self, _alpha_LB):
        return 1.0

    def initial_bound_sum(self, _initial_error):
        return 0.0

    def accumulate(self, _bound_sum, _residual_dual_norm, _alpha_LB):
        return (self.residual_scaling_numer(_alpha_LB) * _residual_dual_norm /
                self.residual_scaling_denom(_alpha_LB)) ** 2


__all__ = [
    "ErrorBoundFormula",
    "TransientL2ErrorBound",
    "CoerciveErrorBound"
]
