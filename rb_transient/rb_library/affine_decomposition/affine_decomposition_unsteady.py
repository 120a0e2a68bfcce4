#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Wed Mar 13 09:40:21 2024
"""

import os

import rb_transient.rb_library.affine_decomposition.affine_decomposition as ad

import logging.config

log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


class AffineDecompositionUnsteady(ad.AffineDecomposition):
    """Class which defines the affine decomposition features of an unsteady problem.
    It inherits from :class:`~affine_decomposition.AffineDecomposition`

    :var self.M_qa: number of affine components of the stiffness operator
    :var self.M_qf: number of affine components of the right-hand side vector
    :var self.M_qm: number of affine components of the mass operator
    """

    def __init__(self, _qa=None, _qf=None, _qm=None, _ql=None):
        """AffineDecompositionUnsteady class initialization

        :param _qa: number of affine components for the stiffness operator, if not None. If None, the corresponding
           class attribute is set to 0
        :type _qa: int or NoneType
        :param _qf: number of affine components for the right-hand side vector, if not None. If None, the corresponding
           class attribute is set to 0
        :type _qf: int or NoneType
        :param _qm: number of affine components for the mass operator if not None. If None, the corresponding class
           attribute is set to 0
        :type _qm: int or NoneType
        :param _ql: number of affine components for each output functional, if not None
        :type _ql: list[int] or NoneType
        """

        self.M_qm = 0
        super().__init__(_qa=_qa, _qf=_qf, _ql=_ql)
        self.M_qm = self._check_Q(_qm, 'M') if _qm is not None else 0
        return

    @property
    def qm(self):
        """Getter method, which returns the number of affine components for the mass operator

        :return: number of affine components for the mass operator
        :rtype: int
        """

        return self.M_qm

    def set_Q(self, _qa, _qf, _ql=None, _qm=None):
        """Setter method, which allows to set the number of affine components for the stiffness operator, for the mass
        operator, for the right-hand side vector and for the outputs.

        :param _qa: number of affine components for the stiffness operator
        :type _qa: int
        :param _qf: number of affine components for the right-hand side vector
        :type _qf: int
        :param _ql: number of affine components for each output functional. Defaults to None
        :type _ql: list[int] or NoneType
        :param _qm: number of affine components for the mass operator. If None, it is left unchanged. Defaults to None
        :type _qm: int or NoneType
        """

        super().set_Q(_qa, _qf, _ql)
        if _qm is not None:
            self.M_qm = self._check_Q(_qm, 'M')

        return

    def as_dict(self):
        ad_dict = super().as_dict()
        ad_dict['Q_m'] = self.M_qm
        return ad_dict

    def print_ad_summary(self):
        """Method to print the main features of the AffineDecompositionUnsteady class instance
        """

        logger.info(f"\n------------- AD SUMMARY -------------\n"
                    f"Number of affine decomposition matrices A {self.M_qa}\n"
                    f"Number of affine decomposition vectors  f {self.M_qf}\n"
                    f"Number of affine decomposition matrices M {self.M_qm}\n"
                    f"Number of affine decomposition outputs  l {self.M_ql}\n")

        return


__all__ = [
    "AffineDecompositionUnsteady"
]
