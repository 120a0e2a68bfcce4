#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Thu Mar 14 10:05:33 2024
"""

import os

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


class TemporalDiscretization:
    """Class holding the features of the generalized theta time marching scheme: the time-step size, the value of
    theta (0 for Forward Euler, 0.5 for Crank-Nicolson, 1 for Backward Euler), the current time step index and the
    total number of time steps. The current time step can never exceed the total number of time steps.
    """

    def __init__(self, _delta_t=1.0, _euler_theta=1.0, _n_time_steps=0):
        """Initialization of the temporal discretization

        :param _delta_t: time-step size. Defaults to 1.0
        :type _delta_t: float
        :param _euler_theta: value of theta in the generalized theta method. Defaults to 1.0 (Backward Euler)
        :type _euler_theta: float
        :param _n_time_steps: total number of time steps. Defaults to 0
        :type _n_time_steps: int
        """

        self.M_delta_t = 1.0
        self.M_euler_theta = 1.0
        self.M_current_time_step = 0
        self.M_n_time_steps = 0

        self.set_delta_t(_delta_t)
        self.set_euler_theta(_euler_theta)
        self.set_n_time_steps(_n_time_steps)

        return

    @classmethod
    def from_specifics(cls, _time_specifics):
        """Builds the temporal discretization from a dictionary featuring the fields 'final_time',
        'number_of_time_instances' and, optionally, 'theta' (defaults to 1.0)

        :param _time_specifics: dictionary with the time specifics of the problem
        :type _time_specifics: dict
        :return: the temporal discretization
        :rtype: TemporalDiscretization
        """

        if 'final_time' not in _time_specifics or 'number_of_time_instances' not in _time_specifics:
            logger.critical("The time specifics must contain the fields 'final_time' and 'number_of_time_instances'")
            raise ValueError("Incomplete time specifics")

        n_time_steps = int(_time_specifics['number_of_time_instances'])
        if n_time_steps <= 0:
            logger.critical(f"Invalid number of time instances {n_time_steps}")
            raise ValueError("The number of time instances must be positive")

        return cls(_delta_t=_time_specifics['final_time'] / n_time_steps,
                   _euler_theta=_time_specifics.get('theta', 1.0),
                   _n_time_steps=n_time_steps)

    def get_delta_t(self):
        return self.M_delta_t

    def set_delta_t(self, _delta_t):
        """Setter method for the time-step size

        :param _delta_t: time-step size; it must be positive
        :type _delta_t: float
        """

        if not _delta_t > 0.0:
            logger.critical(f"Invalid time-step size {_delta_t}")
            raise ValueError("The time-step size must be positive")

        self.M_delta_t = float(_delta_t)
        return

    def get_euler_theta(self):
        return self.M_euler_theta

    def set_euler_theta(self, _euler_theta):
        """Setter method for the value of theta in the generalized theta method

        :param _euler_theta: value of theta; it must lie in [0,1]
        :type _euler_theta: float
        """

        if not 0.0 <= _euler_theta <= 1.0:
            logger.critical(f"Invalid value of theta {_euler_theta}")
            raise ValueError("The value of theta must lie in [0,1]")

        self.M_euler_theta = float(_euler_theta)
        return

    def get_time_step(self):
        return self.M_current_time_step

    def set_time_step(self, _k):
        """Setter method for the current time step index

        :param _k: time step index; it must lie in [0, n_time_steps]
        :type _k: int
        """

        if int(_k) != _k or not 0 <= _k <= self.M_n_time_steps:
            logger.critical(f"Invalid time step {_k}; the number of time steps is {self.M_n_time_steps}")
            raise ValueError("The time step must be an integer in [0, n_time_steps]")

        self.M_current_time_step = int(_k)
        return

    def get_n_time_steps(self):
        return self.M_n_time_steps

    def set_n_time_steps(self, _n_time_steps):
        """Setter method for the total number of time steps. If the current time step exceeds the new number of time
        steps, it is reset to 0.

        :param _n_time_steps: number of time steps; it must be a non-negative integer
        :type _n_time_steps: int
        """

        if int(_n_time_steps) != _n_time_steps or _n_time_steps < 0:
            logger.critical(f"Invalid number of time steps {_n_time_steps}")
            raise ValueError("The number of time steps must be a non-negative integer")

        self.M_n_time_steps = int(_n_time_steps)
        if self.M_current_time_step > self.M_n_time_steps:
            self.M_current_time_step = 0

        return

    def get_time(self, _k=None):
        """Time instant associated to the time step _k, or to the current time step if _k is None
        """
        return self.M_delta_t * (self.M_current_time_step if _k is None else _k)

    @property
    def delta_t(self):
        return self.M_delta_t

    @property
    def euler_theta(self):
        return self.M_euler_theta

    @property
    def time_step(self):
        return self.M_current_time_step

    @property
    def n_time_steps(self):
        return self.M_n_time_steps

    @property
    def final_time(self):
        return self.M_delta_t * self.M_n_time_steps

    def as_dict(self):
        return {'delta_t': self.M_delta_t,
                'euler_theta': self.M_euler_theta,
                'n_time_steps': self.M_n_time_steps}

    def print_summary(self):
        logger.info(f"\n------------- TIME DISCRETIZATION SUMMARY -------------\n"
                    f"Time-step size {self.M_delta_t}\n"
                    f"Theta {self.M_euler_theta}\n"
                    f"Number of time steps {self.M_n_time_steps}\n")
        return


__all__ = [
    "TemporalDiscretization"
]
