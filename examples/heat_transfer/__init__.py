#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
The *heat_transfer* submodule contains a test case for the transient RB evaluation: the heat equation on the unit
interval, with two subdomains of parametrized conductivity, a uniform heat source and homogeneous Dirichlet boundary
conditions. It features:

    * *heat_problem*: the definition of the theta functions and the finite difference assembly of the high-fidelity
      affine components
    * *config*: the configuration of the test case
    * *main_transient*: the main file, which builds (or imports) the offline quantities and evaluates the reduced
      problem for some test parameter values
"""
