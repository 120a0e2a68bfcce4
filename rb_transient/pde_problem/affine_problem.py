#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Mar 12 11:42:10 2024
"""

import numpy as np
import os

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


def default_full_theta_function(*args):
    """ Function which is intended to return the default parameter-dependent functions.
    Since all parameter-dependent affine-decomposable problems are characterized by different parameter-dependent
    functions, the function will actually just raise an Exception, inviting the user to define proper functions
    for the problem at hand.
    """

    raise Exception("You are using the default full theta function, please provide specific ones for your problem!")


def default_stability_lower_bound(_param):
    """Default lower bound of the coercivity (stability) constant, equal to 1 for every parameter value
    """
    return 1.0


class AffineProblem:
    """Class defining the parameter-dependent scalar functions ("theta functions") of a steady affinely parametrized
    problem: the ones of the stiffness operator A, of the right-hand side F and of every output functional, together
    with a lower bound of the coercivity constant. Specific problems either inherit from this class and implement
    :func:`~affine_problem.AffineProblem.define_theta_functions`, or set the functions via
    :func:`~affine_problem.AffineProblem.set_theta_functions`.
    """

    def __init__(self, _parameter_handler):
        """Initializing the affine problem, equipping it with the parameter handler

        :param _parameter_handler: ParameterHandler object, which performs the task of handling the parameters involved
            in the problem
        :type _parameter_handler: ParameterHandler
        """

        self.M_full_theta_a = default_full_theta_function
        self.M_full_theta_f = default_full_theta_function
        self.M_full_theta_outputs = []
        self.M_stability_lower_bound = default_stability_lower_bound

        self.define_theta_functions()
        self.M_parameter_handler = _parameter_handler

        return

    def define_theta_functions(self):
        """Method to define the parameter-dependent functions characterizing the problem. It is meant to be overridden
        in the specific problems; the generic problem keeps the default functions, which raise whenever evaluated
        """
        return

    def set_theta_functions(self, theta_a=None, theta_f=None, theta_outputs=None):
        """Setter method for the parameter-dependent functions. Each function takes the parameter value and returns
        the array of the coefficients of all the affine components of the corresponding operator.

        :param theta_a: theta functions of the stiffness operator. If None, it is left unchanged. Defaults to None
        :type theta_a: callable or NoneType
        :param theta_f: theta functions of the right-hand side. If None, it is left unchanged. Defaults to None
        :type theta_f: callable or NoneType
        :param theta_outputs: theta functions of the outputs, one per output. If None, it is left unchanged.
            Defaults to None
        :type theta_outputs: list[callable] or NoneType
        """

        if theta_a is not None:
            self.M_full_theta_a = theta_a
        if theta_f is not None:
            self.M_full_theta_f = theta_f
        if theta_outputs is not None:
            self.M_full_theta_outputs = list(theta_outputs)

        return

    def set_stability_lower_bound(self, _stability_lower_bound):
        """Setter method for the function returning a lower bound of the coercivity constant for a given parameter

        :param _stability_lower_bound: function of the parameter value, returning a positive scalar
        :type _stability_lower_bound: callable
        """
        self.M_stability_lower_bound = _stability_lower_bound
        return

    @staticmethod
    def _evaluate(_fun, _param, _name):
        theta = np.atleast_1d(np.array(_fun(_param), dtype=float))
        if theta.ndim != 1:
            logger.critical(f"The theta functions of {_name} must return a 1D array, got shape {theta.shape}")
            raise ValueError(f"Invalid shape {theta.shape} for the theta functions of {_name}")
        return theta

    def get_full_theta_a(self, _param):
        """Method which returns the value of all the parameter-dependent functions associated to the
        stiffness operator A, for the parameter value _param

        :param _param: value of the parameters
        :type _param: numpy.ndarray
        :return: value of the parameter-dependent functions
        :rtype: numpy.ndarray
        """
        return self._evaluate(self.M_full_theta_a, _param, 'A')

    def get_full_theta_f(self, _param):
        """Method which returns the value of all the parameter-dependent functions associated to the
        right-hand side F, for the parameter value _param

        :param _param: value of the parameters
        :type _param: numpy.ndarray
        :return: value of the parameter-dependent functions
        :rtype: numpy.ndarray
        """
        return self._evaluate(self.M_full_theta_f, _param, 'F')

    def get_full_theta_output(self, _param, _n):
        """Method which returns the value of all the parameter-dependent functions associated to the output of
        index _n, for the parameter value _param

        :param _param: value of the parameters
        :type _param: numpy.ndarray
        :param _n: index of the output
        :type _n: int
        :return: value of the parameter-dependent functions
        :rtype: numpy.ndarray
        """
        if not 0 <= _n < len(self.M_full_theta_outputs):
            raise IndexError(f"Invalid output index {_n}; the problem has {self.n_outputs} outputs")
        return self._evaluate(self.M_full_theta_outputs[_n], _param, f'output {_n}')

    def get_stability_lower_bound(self, _param):
        """Method which returns the lower bound of the coercivity constant for the parameter value _param

        :param _param: value of the parameters
        :type _param: numpy.ndarray
        :return: lower bound of the coercivity constant
        :rtype: float
        """

        alpha_LB = float(self.M_stability_lower_bound(_param))
        if alpha_LB <= 0.0:
            logger.critical(f"Non-positive stability lower bound {alpha_LB} for parameter {_param}")
            raise ValueError("The stability lower bound must be positive")
        return alpha_LB

    @property
    def n_outputs(self):
        return len(self.M_full_theta_outputs)

    @property
    def parameter_handler(self):
        return self.M_parameter_handler

    @property
    def param(self):
        return self.M_parameter_handler.param


__all__ = [
    "default_full_theta_function",
    "default_stability_lower_bound",
    "AffineProblem"
]
