#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Wed Mar 13 09:12:40 2024
"""

import os

import logging.config

# Create logger
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


class AffineDecomposition:
    """Class which defines the affine decomposition features of a steady problem

    :var self.M_qa: number of affine components of the stiffness operator
    :var self.M_qf: number of affine components of the right-hand side vector
    :var self.M_ql: number of affine components of each output functional
    """

    def __init__(self, _qa=None, _qf=None, _ql=None):
        """AffineDecomposition class initialization

        :param _qa: number of affine components for the stiffness operator, if not None. If None, the corresponding
           class attribute is set to 0
        :type _qa: int or NoneType
        :param _qf: number of affine components for the right-hand side vector, if not None. If None, the corresponding
           class attribute is set to 0
        :type _qf: int or NoneType
        :param _ql: number of affine components for each output functional, if not None. If None, no output is
           considered
        :type _ql: list[int] or NoneType
        """

        self.M_qa = 0
        self.M_qf = 0
        self.M_ql = []
        self.set_Q(_qa if _qa is not None else 0,
                   _qf if _qf is not None else 0,
                   _ql)
        return

    @staticmethod
    def _check_Q(_Q, _name):
        if int(_Q) != _Q or _Q < 0:
            logger.critical(f"Invalid number of affine components {_Q} for {_name}")
            raise ValueError(f"The number of affine components for {_name} must be a non-negative integer")
        return int(_Q)

    @property
    def qa(self):
        """Getter method, which returns the number of affine components for the stiffness operator

        :return: number of affine components for the stiffness operator
        :rtype: int
        """
        return self.M_qa

    @property
    def qf(self):
        """Getter method, which returns the number of affine components for the right-hand side vector

        :return: number of affine components for the right-hand side vector
        :rtype: int
        """
        return self.M_qf

    @property
    def ql(self):
        """Getter method, which returns the number of affine components of all the output functionals

        :return: number of affine components of each output functional
        :rtype: list[int]
        """
        return self.M_ql

    @property
    def n_outputs(self):
        return len(self.M_ql)

    def set_Q(self, _qa, _qf, _ql=None):
        """Setter method, which allows to set the number of affine components for the stiffness operator, for the
        right-hand side vector and for the output functionals, in case it has not already been done in
        :func:`~affine_decomposition.AffineDecomposition.__init__`

        :param _qa: number of affine components for the stiffness operator
        :type _qa: int
        :param _qf: number of affine components for the right-hand side vector
        :type _qf: int
        :param _ql: number of affine components for each output functional. If None, no output is considered.
            Defaults to None
        :type _ql: list[int] or NoneType
        """
        self.M_qa = self._check_Q(_qa, 'A')
        self.M_qf = self._check_Q(_qf, 'f')
        self.M_ql = [self._check_Q(_q, f'output {n}') for n, _q in enumerate(_ql)] if _ql is not None else []
        return

    def as_dict(self):
        """Method returning the numbers of affine components as a dictionary, used in the offline data manifest

        :return: numbers of affine components
        :rtype: dict
        """
        return {'Q_a': self.M_qa, 'Q_f': self.M_qf, 'Q_l': list(self.M_ql)}

    def print_ad_summary(self):
        """Method to print the main features of the AffineDecomposition class instance
        """
        logger.info(f"\n------------- AD SUMMARY -------------\n"
                    f"Number of affine decomposition matrices A {self.M_qa}\n"
                    f"Number of affine decomposition vectors  f {self.M_qf}\n"
                    f"Number of affine decomposition outputs  l {self.M_ql}")
        return


__all__ = [
    "AffineDecomposition"
]
