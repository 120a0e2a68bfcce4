#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Mar 25 10:21:44 2024
"""

import numpy as np
import scipy.sparse
import scipy.sparse.linalg
import os

import rb_transient.pde_problem.affine_problem_unsteady as apu

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../rb_transient/log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


def heat_full_theta_a(_param):
    """Conductivities of the two subdomains
    """
    return np.array([_param[0], _param[1]])


def heat_full_theta_f(_param):
    return np.array([1.0])


def heat_full_theta_m(_param):
    return np.array([1.0])


def heat_full_theta_output(_param):
    return np.array([1.0])


def heat_stability_lower_bound(_param):
    """Min-theta lower bound of the coercivity constant, with respect to the energy norm at unit conductivities
    """
    return float(np.min(_param))


class HeatProblem(apu.AffineProblemUnsteady):
    """Heat equation on (0,1), with conductivity _param[0] on (0, 1/2) and _param[1] on (1/2, 1)
    """

    def __init__(self, _parameter_handler):
        super().__init__(_parameter_handler)
        return

    def define_theta_functions(self):
        self.M_full_theta_a = heat_full_theta_a
        self.M_full_theta_f = heat_full_theta_f
        self.M_full_theta_m = heat_full_theta_m
        self.M_full_theta_outputs = [heat_full_theta_output]
        self.M_stability_lower_bound = heat_stability_lower_bound
        return


def assemble_fom_operators(_n_nodes):
    """Finite difference assembly of the affine components of the heat equation on _n_nodes internal nodes

    :param _n_nodes: number of internal nodes
    :type _n_nodes: int
    :return: dictionary with the stiffness components 'A', the right-hand side components 'f', the mass components
        'M', the output components 'output', the inner product matrix 'X', the L2 matrix 'L2' and the initial condition
        'u0'
    :rtype: dict
    """

    h = 1.0 / (_n_nodes + 1)
    nodes = np.linspace(h, 1.0 - h, _n_nodes)

    # conductivity of the cell between nodes i-1 and i (boundary nodes included)
    cell_centers = np.linspace(h / 2, 1.0 - h / 2, _n_nodes + 1)
    A_components = []
    for in_subdomain in (cell_centers < 0.5, cell_centers >= 0.5):
        k = in_subdomain.astype(float)
        main_diagonal = (k[:-1] + k[1:]) / h
        off_diagonal = -k[1:-1] / h
        A_components.append(scipy.sparse.diags([off_diagonal, main_diagonal, off_diagonal], [-1, 0, 1],
                                               format='csc'))

    M = scipy.sparse.identity(_n_nodes, format='csc') * h

    fom_operators = {'A': A_components,
                     'f': [h * np.ones(_n_nodes)],
                     'M': [M],
                     'output': [[h * np.ones(_n_nodes)]],
                     'X': (A_components[0] + A_components[1]).tocsc(),
                     'L2': M,
                     'u0': np.sin(np.pi * nodes)}

    logger.info(f"Assembled the heat transfer operators on {_n_nodes} nodes")
    return fom_operators


def fom_time_marching(_fom_operators, _param, _temporal_discretization):
    """High-fidelity generalized theta time marching, used to generate the basis functions

    :return: high-fidelity solutions at all the time steps, initial condition included
    :rtype: numpy.ndarray
    """

    dt = _temporal_discretization.delta_t
    theta = _temporal_discretization.euler_theta

    A = heat_full_theta_a(_param)[0] * _fom_operators['A'][0] + heat_full_theta_a(_param)[1] * _fom_operators['A'][1]
    M = _fom_operators['M'][0]
    f = _fom_operators['f'][0]

    lhs = (M / dt + theta * A).tocsc()
    rhs_matrix = M / dt - (1.0 - theta) * A
    solver = scipy.sparse.linalg.factorized(lhs)

    solutions = [_fom_operators['u0']]
    for _ in range(_temporal_discretization.n_time_steps):
        solutions.append(solver(rhs_matrix.dot(solutions[-1]) + f))

    return np.array(solutions)


__all__ = [
    "HeatProblem",
    "assemble_fom_operators",
    "fom_time_marching"
]
