#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Mar 12 11:15:36 2024
"""

import numpy as np
import os

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


class ParameterHandler:
    """Class to handle the parameter vector of a parametrized problem, i.e. its admissible range and its current
    value
    """

    def __init__(self, _num_parameters=0):
        """Initializing the parameter handler with default values

        :param _num_parameters: number of parameters. If bounds are later assigned, it is overwritten. Defaults to 0
        :type _num_parameters: int
        """

        self.M_param_min = -np.inf * np.ones(_num_parameters)
        self.M_param_max = np.inf * np.ones(_num_parameters)
        self.M_param = np.zeros(_num_parameters)
        self.M_num_parameters = _num_parameters

        return

    def assign_parameters_bounds(self, _param_min, _param_max):
        """Method to assign the bounding values (min and max) to the parameters involved in the problem. The current
        value of the parameter is set to the lower bound.

        :param _param_min: minimum values of the parameters
        :type _param_min: numpy.ndarray
        :param _param_max: maximum values of the parameters
        :type _param_max: numpy.ndarray
        """

        _param_min = np.atleast_1d(np.array(_param_min, dtype=float))
        _param_max = np.atleast_1d(np.array(_param_max, dtype=float))

        if _param_min.shape != _param_max.shape or np.any(_param_min > _param_max):
            logger.critical(f"Invalid parameter bounds: min {_param_min}, max {_param_max}")
            raise ValueError("Parameter bounds must have the same shape and satisfy min <= max")

        self.M_param_min = _param_min
        self.M_param_max = _param_max
        self.M_param = np.copy(_param_min)
        self.M_num_parameters = _param_min.shape[0]
        return

    def assign_parameters(self, _param):
        """Method to assign the parameter value, provided that the input has the right shape and lies within the
        parameter bounds

        :param _param: value of the parameter
        :type _param: numpy.ndarray or list
        """

        _param = np.atleast_1d(np.array(_param, dtype=float))

        if _param.shape[0] != self.M_num_parameters:
            logger.critical(f"Expected {self.M_num_parameters} parameters, got {_param.shape[0]}")
            raise ValueError(f"Invalid parameter shape {_param.shape}")

        if np.any(_param < self.M_param_min) or np.any(_param > self.M_param_max):
            logger.critical(f"Parameter {_param} lies outside the range [{self.M_param_min}, {self.M_param_max}]")
            raise ValueError("Parameter value out of range")

        self.M_param = _param
        return

    def rescale_parameters(self, _param):
        """Method to rescale a parameter from [0;1] to the proper bounding interval

        :param _param: normalized value of the parameter
        :type _param: numpy.ndarray
        :return: rescaled value of the parameter
        :rtype: numpy.ndarray
        """
        return self.M_param_min + _param * (self.M_param_max - self.M_param_min)

    def generate_parameter(self, seed=42):
        """Method to generate, uniformly at random, a parameter value within the bounds and to assign it as the
        current one

        :param seed: seed for the random number generation. Defaults to 42
        :type seed: int
        :return: the generated parameter value
        :rtype: numpy.ndarray
        """

        assert self.M_num_parameters > 0
        assert np.all(np.isfinite(self.M_param_min)) and np.all(np.isfinite(self.M_param_max)), \
            "Finite parameter bounds are needed to generate random parameters"

        rng = np.random.default_rng(seed)
        self.M_param = self.rescale_parameters(rng.uniform(size=self.M_num_parameters))

        return self.M_param

    @property
    def param(self):
        """Getter method, to get the parameter value

        :return: parameter value
        :rtype: numpy.ndarray
        """
        return self.M_param

    @property
    def num_parameters(self):
        return self.M_num_parameters

    @property
    def param_min(self):
        return self.M_param_min

    @property
    def param_max(self):
        return self.M_param_max


__all__ = [
    "ParameterHandler"
]
