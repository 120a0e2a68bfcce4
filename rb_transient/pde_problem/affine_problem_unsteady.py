#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Mar 12 12:20:03 2024
"""

import os
import rb_transient.pde_problem.affine_problem as ap


import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


class AffineProblemUnsteady(ap.AffineProblem):
    """Class defining the theta functions of an unsteady affinely parametrized problem, which, with respect to the
    steady one, also features an affinely parametrized mass operator M. It inherits from
    :class:`~affine_problem.AffineProblem`
    """

    def __init__(self, _parameter_handler):
        """Initializing the unsteady affine problem, equipping it with the parameter handler

        :param _parameter_handler: ParameterHandler object, which performs the task of handling the parameters involved
            in the problem
        :type _parameter_handler: ParameterHandler
        """

        self.M_full_theta_m = ap.default_full_theta_function
        super().__init__(_parameter_handler)

        return

    def set_theta_functions(self, theta_a=None, theta_f=None, theta_outputs=None, theta_m=None):
        """Setter method for the parameter-dependent functions, including the ones of the mass operator. Refer to
        :func:`~affine_problem.AffineProblem.set_theta_functions` for the other arguments.

        :param theta_m: theta functions of the mass operator. If None, it is left unchanged. Defaults to None
        :type theta_m: callable or NoneType
        """

        super().set_theta_functions(theta_a=theta_a, theta_f=theta_f, theta_outputs=theta_outputs)
        if theta_m is not None:
            self.M_full_theta_m = theta_m

        return

    def get_full_theta_m(self, _param):
        """Method which returns the value of all the parameter-dependent functions associated to the
        mass operator M, for the parameter value _param

        :param _param: value of the parameters
        :type _param: numpy.ndarray
        :return: value of the parameter-dependent functions
        :rtype: numpy.ndarray
        """
        return self._evaluate(self.M_full_theta_m, _param, 'M')


__all__ = [
    "AffineProblemUnsteady"
]
