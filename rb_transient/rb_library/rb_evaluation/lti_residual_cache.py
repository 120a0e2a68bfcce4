#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Fri Mar 15 16:03:12 2024
"""

import numpy as np
import os

import rb_transient.utils.errors as err

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


class LTIResidualCache:
    """Container of the parameter-dependent, solution-independent terms of the residual dual norm of a linear
    time-invariant problem. The terms are tagged with the parameter value and the basis size they have been computed
    for, so that their use with a different parameter or basis size is detected.

    :var self.M_Fq_term: contribution of the right-hand side alone
    :var self.M_Fq_Aq_vector: right-hand side / stiffness cross terms, size N
    :var self.M_Aq_Aq_matrix: stiffness / stiffness cross terms, size N x N
    :var self.M_Fq_Mq_vector: right-hand side / mass cross terms, size N
    :var self.M_Aq_Mq_matrix: stiffness / mass cross terms, size N x N (row index for the stiffness basis function,
        column index for the mass basis function)
    :var self.M_Mq_Mq_matrix: mass / mass cross terms, size N x N
    :var self.M_key: pair (parameter value, basis size) the terms are valid for; None if no terms are stored
    """

    def __init__(self):
        self.M_Fq_term = 0.0
        self.M_Fq_Aq_vector = np.zeros(0)
        self.M_Aq_Aq_matrix = np.zeros((0, 0))
        self.M_Fq_Mq_vector = np.zeros(0)
        self.M_Aq_Mq_matrix = np.zeros((0, 0))
        self.M_Mq_Mq_matrix = np.zeros((0, 0))
        self.M_key = None
        return

    @staticmethod
    def make_key(_param, _N):
        return tuple(float(p) for p in np.atleast_1d(_param)), int(_N)

    def store(self, _param, _N, Fq_term, Fq_Aq_vector, Aq_Aq_matrix, Fq_Mq_vector, Aq_Mq_matrix, Mq_Mq_matrix):
        """Method to store the cached terms, computed for the parameter value _param and the basis size _N

        :param _param: parameter value
        :type _param: numpy.ndarray
        :param _N: basis size
        :type _N: int
        """

        assert Fq_Aq_vector.shape == (_N,) and Fq_Mq_vector.shape == (_N,)
        assert Aq_Aq_matrix.shape == (_N, _N) and Aq_Mq_matrix.shape == (_N, _N) and Mq_Mq_matrix.shape == (_N, _N)

        self.M_Fq_term = float(Fq_term)
        self.M_Fq_Aq_vector = Fq_Aq_vector
        self.M_Aq_Aq_matrix = Aq_Aq_matrix
        self.M_Fq_Mq_vector = Fq_Mq_vector
        self.M_Aq_Mq_matrix = Aq_Mq_matrix
        self.M_Mq_Mq_matrix = Mq_Mq_matrix
        self.M_key = self.make_key(_param, _N)

        logger.debug(f"Cached the online residual terms for N={_N} and parameter {self.M_key[0]}")
        return

    def invalidate(self):
        self.M_key = None
        return

    def is_valid_for(self, _param, _N):
        return self.M_key is not None and self.M_key == self.make_key(_param, _N)

    def check(self, _param, _N):
        """Method checking that the cached terms have been computed for the parameter value _param and the basis
        size _N

        :raises StaleCacheError: if no terms are cached or they refer to a different parameter or basis size
        """

        if self.M_key is None:
            logger.critical("The online residual terms have not been cached")
            raise err.StaleCacheError("No cached online residual terms are available; "
                                      "call cache_online_residual_terms first")

        if not self.is_valid_for(_param, _N):
            logger.critical(f"The online residual terms have been cached for N={self.M_key[1]} and parameter "
                            f"{self.M_key[0]}, while N={_N} and parameter {tuple(np.atleast_1d(_param))} are used")
            raise err.StaleCacheError("The cached online residual terms are stale; "
                                      "call cache_online_residual_terms again")

        return

    @property
    def key(self):
        return self.M_key

    @property
    def Fq_term(self):
        return self.M_Fq_term

    @property
    def Fq_Aq_vector(self):
        return self.M_Fq_Aq_vector

    @property
    def Aq_Aq_matrix(self):
        return self.M_Aq_Aq_matrix

    @property
    def Fq_Mq_vector(self):
        return self.M_Fq_Mq_vector

    @property
    def Aq_Mq_matrix(self):
        return self.M_Aq_Mq_matrix

    @property
    def Mq_Mq_matrix(self):
        return self.M_Mq_Mq_matrix


__all__ = [
    "LTIResidualCache"
]
