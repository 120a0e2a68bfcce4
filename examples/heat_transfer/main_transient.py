#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Mar 25 15:02:37 2024
"""

import numpy as np
import os

import examples.heat_transfer.heat_problem as hp
import examples.heat_transfer.config as config

import rb_transient.pde_problem.parameter_handler as ph
import rb_transient.rb_library.affine_decomposition.affine_decomposition_unsteady as adu
import rb_transient.rb_library.temporal_discretization as td
import rb_transient.rb_library.rb_evaluation.transient_rb_evaluation as trbe
import rb_transient.rb_library.rb_construction.transient_rb_construction as trbc

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../rb_transient/log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)


def build_offline_quantities(my_rb_evaluation, fom_operators):
    """Enriches the basis with subsampled high-fidelity trajectories at the training parameters, until N_max basis
    functions are found
    """

    my_construction = trbc.TransientRBConstruction(my_rb_evaluation,
                                                   fom_operators['X'], fom_operators['L2'],
                                                   fom_operators['A'], fom_operators['f'], fom_operators['M'],
                                                   fom_operators['u0'], fom_operators['output'])

    my_construction.enrich_basis(fom_operators['u0'])
    for param in config.training_params:
        snapshots = hp.fom_time_marching(fom_operators, param, my_rb_evaluation.temporal_discretization)
        for snapshot in snapshots[config.snapshots_time_subsample::config.snapshots_time_subsample]:
            if my_construction.N >= config.N_max:
                break
            try:
                my_construction.enrich_basis(snapshot)
            except ValueError:
                logger.warning(f"Snapshot at parameter {param} discarded, being linearly dependent on the basis")

    logger.info(f"Offline phase completed with N={my_construction.N} basis functions")
    return my_construction


def execute():

    ###################################################################################################################
    ############################################### INITIALIZATION ####################################################
    ###################################################################################################################

    my_parameter_handler = ph.ParameterHandler()
    my_parameter_handler.assign_parameters_bounds(config.param_min, config.param_max)

    my_problem = hp.HeatProblem(my_parameter_handler)

    my_affine_decomposition = adu.AffineDecompositionUnsteady(_qa=2, _qf=1, _qm=1, _ql=[1])
    my_affine_decomposition.print_ad_summary()

    my_temporal_discretization = td.TemporalDiscretization.from_specifics(config.fom_specifics)
    my_temporal_discretization.print_summary()

    my_rb_evaluation = trbe.TransientRBEvaluation(my_problem, my_affine_decomposition, my_temporal_discretization)

    ###################################################################################################################
    ############################################### OFFLINE PHASE #####################################################
    ###################################################################################################################

    if config.IMPORT_OFFLINE_QUANTITIES:
        my_rb_evaluation.read_offline_data_from_files(config.offline_data_directory)
    else:
        fom_operators = hp.assemble_fom_operators(config.fom_specifics['number_of_nodes'])
        build_offline_quantities(my_rb_evaluation, fom_operators)

        if config.CLEAR_RIESZ_REPRESENTORS:
            my_rb_evaluation.clear_riesz_representors()

        if config.SAVE_OFFLINE_QUANTITIES:
            my_rb_evaluation.write_offline_data_to_files(config.offline_data_directory)

    ###################################################################################################################
    ############################################### ONLINE PHASE ######################################################
    ###################################################################################################################

    for param in config.test_params:
        my_rb_evaluation.set_parameters(param)
        for N in config.test_N:
            if N > my_rb_evaluation.get_n_basis_functions():
                logger.warning(f"Basis size {N} not available; skipping it")
                continue

            final_error_bound = my_rb_evaluation.solve(N)
            logger.info(f"Parameter {np.array(param)}, N={N}: "
                        f"final output {my_rb_evaluation.RB_outputs_all_k[-1, 0]:.6e} "
                        f"+/- {my_rb_evaluation.RB_output_error_bounds_all_k[-1, 0]:.6e}, "
                        f"final error bound {final_error_bound:.6e}")

    return


if __name__ == "__main__":
    execute()
