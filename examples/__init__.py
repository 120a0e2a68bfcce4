#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
The *examples* module collects runnable test cases of the methods implemented in *rb_transient*; it is divided in
submodules, each one referring to a specific toy problem. Currently, it features the *heat_transfer* test case: a
one-dimensional heat equation with two subdomains of different conductivity, whose reduced basis is built from
high-fidelity trajectories, saved to file and evaluated online for several parameters and basis sizes.
"""
